"""Share a folder from the terminal: ``foldershare ~/Pictures``."""

import argparse
import sys
import time

from colorama import Fore, Style, init

from . import __version__
from .config import Settings
from .errors import BindError, InvalidFolder
from .log import setup_logging
from .qr import print_qr_ascii
from .session import ShareSession


def build_parser():
    parser = argparse.ArgumentParser(
        prog='foldershare',
        description='Share a folder with phones and laptops on the same network',
    )
    parser.add_argument('folder', nargs='?', default='.', help='Folder to share (default: current directory)')
    parser.add_argument('--port', type=int, help='Port number (default: any free port)')
    parser.add_argument('--host', help='Address to listen on (default: 0.0.0.0)')
    parser.add_argument('--max-upload-mb', type=int, help='Per-file upload limit in MiB (default: 100)')
    parser.add_argument('--no-qr', action='store_true', help='Do not print the QR code')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING or ERROR (default: INFO)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def wait_for_interrupt(session):
    while session.running:
        time.sleep(0.5)


def main(argv=None):
    args = build_parser().parse_args(argv)
    init(autoreset=True)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(Fore.RED + f'❌ {e}')
        return 1
    max_upload = args.max_upload_mb * 1024 * 1024 if args.max_upload_mb else None
    settings = settings.override(port=args.port, bind_host=args.host,
                                 max_upload_bytes=max_upload, log_level=args.log_level)
    setup_logging(settings.log_level)

    session = ShareSession(settings)
    try:
        info = session.start(args.folder)
    except (InvalidFolder, BindError) as e:
        print(Fore.RED + f'❌ {e.message}')
        return 1

    print(Fore.CYAN + '\n🚀 FolderShare\n' + Style.RESET_ALL)
    print(Fore.YELLOW + f'📂 Serving folder: {info.shared_folder}')
    print(Fore.GREEN + f'🌍 Access at: {info.url}' + Style.RESET_ALL)
    if not args.no_qr:
        print()
        print_qr_ascii(info.url, out=sys.stdout)

    print('\n✅ Server running. Press Ctrl+C to stop.')
    try:
        wait_for_interrupt(session)
    except KeyboardInterrupt:
        print('\n🛑 Stopping, waiting for open transfers...')
    finally:
        session.stop()
    return 0
