"""
Command-line entry point.

Run one role per process:

    udp-order-sleuth --rev
    udp-order-sleuth --send --interval 100ms

Ctrl+C (or SIGTERM) stops the role and prints its final statistics.
"""

import argparse
import logging
import os
import signal
import sys
import threading

from . import config
from .protocol.transport import TransportSetupError
from .sleuth_app import ReceiverApp, SenderApp

logger = logging.getLogger(__name__)

WAIT_POLL_SEC = 0.2


def setup_logging(level=config.LOG_LEVEL, log_file=None):
    """Send log records to stdout and, when a filename is given, to ./logs/<log_file>."""
    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers to avoid duplicates
    root.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)-5s] %(message)s',
        datefmt='%H:%M:%S'
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        logs_dir = os.path.join(os.getcwd(), 'logs')
        os.makedirs(logs_dir, exist_ok=True)

        file_handler = logging.FileHandler(os.path.join(logs_dir, log_file), mode='w')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

        logger.info(f"File logging enabled: {log_file}")


def _duration(text):
    try:
        return config.parse_duration(text)
    except config.ConfigError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        prog='udp-order-sleuth',
        description='Detect packet loss and reordering on a UDP multicast group',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  Receive and report gaps on the default group:
    %(prog)s --rev

  Send a message every 100ms:
    %(prog)s --send --interval 100ms

  Send 1000 messages to a custom group, keep receiver results for plotting:
    %(prog)s --send --addr 239.1.1.1:6000 --count 1000
    %(prog)s --rev --addr 239.1.1.1:6000 --results results/run1.json
        ''')

    parser.add_argument('--send', action='store_true',
                        help='Start as a sender')
    parser.add_argument('--rev', action='store_true',
                        help='Start as a receiver')
    parser.add_argument('--addr', default=config.DEFAULT_ADDRESS,
                        help=f'Multicast address (default: {config.DEFAULT_ADDRESS})')
    parser.add_argument('--interval', type=_duration, default=config.SEND_INTERVAL_SEC,
                        help='Send interval for sender, e.g. 1s, 250ms (default: 1s)')
    parser.add_argument('--report-interval', type=_duration, default=config.REPORT_INTERVAL_SEC,
                        help='Sent-count report tick for sender (default: 5s)')
    parser.add_argument('--count', type=int, default=None,
                        help='Stop the sender after this many messages (default: no limit)')
    parser.add_argument('--payload', default=config.PAYLOAD,
                        help='Payload text carried by every message (default: MessageContent)')
    parser.add_argument('--ttl', type=int, default=config.TTL,
                        help='Multicast TTL for sender (default: 1)')
    parser.add_argument('--interface', default=None,
                        help='Local IPv4 address to send from or join on (default: any)')
    parser.add_argument('--buffer-size', type=int, default=config.BUFFER_SIZE,
                        help='Receive buffer in bytes; larger datagrams are truncated (default: 1024)')
    parser.add_argument('--results', default=None,
                        help='Receiver writes its final statistics to this JSON file')
    parser.add_argument('--log-level', choices=list(config.LOG_LEVELS), default='INFO',
                        help='Log level (default: INFO)')
    parser.add_argument('--log-file', default=None,
                        help='Also log to logs/<LOG_FILE>')

    return parser


def build_config(args):
    role = config.ROLE_SENDER if args.send else config.ROLE_RECEIVER
    return config.SleuthConfig(
        role,
        address=args.addr,
        send_interval=args.interval,
        report_interval=args.report_interval,
        payload=args.payload,
        max_messages=args.count,
        ttl=args.ttl,
        interface=args.interface,
        buffer_size=args.buffer_size,
        results_file=args.results
    )


def run_until_interrupted(app, shutdown_event, poll=WAIT_POLL_SEC):
    """
    Start ``app``, block until ``shutdown_event`` is set or the app's loop ends
    on its own, then stop it.

    Returns:
        int: Process exit status, 1 if the sender loop died on a write error
    """
    app.start()

    while not shutdown_event.wait(poll):
        if not app.is_running():
            break

    if shutdown_event.is_set():
        print("\nReceived interrupt signal. Exiting...", flush=True)

    app.stop()

    error = getattr(app, 'error', None)
    if error is not None:
        print(f"Sender stopped on error: {error}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.send == args.rev:
        print("Exactly one of --send or --rev is required.\n", file=sys.stderr)
        parser.print_help()
        return 1

    try:
        sleuth_config = build_config(args)
    except config.ConfigError as e:
        parser.print_usage(sys.stderr)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.LOG_LEVELS[args.log_level], args.log_file)

    try:
        if sleuth_config.is_sender:
            app = SenderApp(sleuth_config)
        else:
            app = ReceiverApp(sleuth_config)
    except TransportSetupError as e:
        print(f"Error initializing {sleuth_config.role} app: {e}", file=sys.stderr)
        return 1

    shutdown_event = threading.Event()

    def signal_handler(signum, frame):
        shutdown_event.set()

    previous = {sig: signal.signal(sig, signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        return run_until_interrupted(app, shutdown_event)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


if __name__ == '__main__':
    sys.exit(main())
