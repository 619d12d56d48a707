"""
xauth key generation tool.

Generates an Ed25519 key pair and writes private.pem (0600) and public.pem
(0644) into a directory, for services that load a long-lived key pair
instead of minting one per process.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from ..util.config import get_config_value
from .manager import KeyManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xauth-keygen",
        description="Generate an Ed25519 key pair for signing xauth tokens.",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        default=get_config_value("key_directory", "keys"),
        help="target directory (default: $XAUTH_KEY_DIRECTORY or ./keys)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="overwrite an existing key pair",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``xauth-keygen`` console script"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    existing = [path for path in KeyManager.key_paths(args.directory) if os.path.exists(path)]
    if existing and not args.force:
        print(f"✗ Key files already exist: {', '.join(existing)} (use --force to overwrite)")
        return 1

    try:
        private_path, public_path = KeyManager.persist(KeyManager.generate(), args.directory)
    except OSError as e:
        logger.error(f"Failed to write key pair: {e}")
        print(f"✗ Could not write key pair to {args.directory}: {e}")
        return 1

    print("✓ Generated Ed25519 key pair")
    print(f"  - Private key: {private_path}")
    print(f"  - Public key:  {public_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
