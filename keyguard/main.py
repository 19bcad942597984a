"""
Command line entry point for keyguard.

Manages the encrypted API keys in the local key store:

    keyguard set openai sk-...
    keyguard get openai
    keyguard list
    keyguard age openai
    keyguard delete openai
    keyguard events
"""

import argparse
import getpass
import json
import logging
import sys
from typing import List, Optional

from . import config
from .audit import SecurityEventLog
from .fingerprint import DeviceFingerprint
from .storage import ApiKeyStore, KeyStore
from .vault import CredentialVault


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=config.APP_NAME, description="Manage encrypted API keys.")
    parser.add_argument("--store", help="Path of the key store file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    set_cmd = sub.add_parser("set", help="Encrypt and store an API key")
    set_cmd.add_argument("provider", choices=config.API_KEY_PROVIDERS)
    set_cmd.add_argument("api_key", nargs="?", help="Key to store; prompted for if omitted")

    get_cmd = sub.add_parser("get", help="Print a stored API key")
    get_cmd.add_argument("provider", choices=config.API_KEY_PROVIDERS)

    delete_cmd = sub.add_parser("delete", help="Delete a stored API key")
    delete_cmd.add_argument("provider", choices=config.API_KEY_PROVIDERS)

    sub.add_parser("list", help="List providers with a usable stored key")

    age_cmd = sub.add_parser("age", help="Show how old a stored key is")
    age_cmd.add_argument("provider", choices=config.API_KEY_PROVIDERS)

    sub.add_parser("events", help="Print the stored security events")
    return parser


def run(args: argparse.Namespace) -> int:
    store = KeyStore(args.store)
    fingerprint = DeviceFingerprint.from_environment()
    keys = ApiKeyStore(store, CredentialVault(fingerprint))
    events = SecurityEventLog(store, user_agent=fingerprint.user_agent)

    if args.command == "set":
        api_key = args.api_key or getpass.getpass(f"{args.provider} API key: ")
        if not api_key:
            print("No key given", file=sys.stderr)
            return 1
        keys.save_api_key(args.provider, api_key)
        events.log_security_event('api_key_stored', {'provider': args.provider})
        print(f"Stored {args.provider} API key")

    elif args.command == "get":
        api_key = keys.load_api_key(args.provider)
        if api_key is None:
            print(f"No {args.provider} API key configured", file=sys.stderr)
            return 1
        print(api_key)

    elif args.command == "delete":
        if keys.delete_api_key(args.provider):
            events.log_security_event('api_key_deleted', {'provider': args.provider})
            print(f"Deleted {args.provider} API key")
        else:
            print(f"No {args.provider} API key stored")

    elif args.command == "list":
        for provider in sorted(keys.load_api_keys()):
            print(provider)

    elif args.command == "age":
        age = keys.check_api_key_age(keys.entry_name(args.provider))
        print(f"{args.provider}: {age.days_old} days old")
        if age.should_rotate:
            print(f"Consider rotating this key (older than {config.API_KEY_ROTATION_DAYS} days)")

    elif args.command == "events":
        for event in events.get_security_events():
            print(json.dumps(event))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=config.LOG_FORMAT)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
