"""
invite-registrar command line interface

Usage:
    invite-registrar generate-invite [LABEL] [RECIPIENT] [--days N]
    invite-registrar invite-id CODE

generate-invite reads INVITER_PRIVATE_KEY and REGISTRAR_ADDRESS from the
environment (or .env).
"""

import argparse
import sys

from eth_utils import to_hex

from registrar.config.settings import get_settings
from registrar.domain.invite import OPEN_RECIPIENT, invite_id_for, invite_message_hash
from registrar.issuer import InviteIssuer, decode_invite_code, encode_invite_code, invite_url

RULE = "================================================="


def cmd_generate_invite(args) -> int:
    """Sign an invite and print its code, URL and submission arguments."""
    settings = get_settings()
    if settings.inviter_private_key is None:
        print("ERROR: INVITER_PRIVATE_KEY environment variable not set", file=sys.stderr)
        return 1

    try:
        issuer = InviteIssuer.from_private_key(
            settings.inviter_private_key.get_secret_value(), settings.registrar_address
        )
        invite = issuer.issue(args.label, args.recipient, expires_in_days=args.days)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(RULE)
    print("Generating Invite Signature")
    print(RULE)
    print("Registrar:", issuer.registrar_address)
    print("Label:", invite.label)
    print("Recipient:", "Anyone" if invite.recipient == OPEN_RECIPIENT else invite.recipient)
    print("Expires in:", args.days, "days")
    print("Expiration timestamp:", invite.expiration)
    print("Message hash:", to_hex(invite_message_hash(issuer.registrar_address, invite)))
    print("Inviter address:", invite.issuer)
    print("Signature:", to_hex(invite.signature))
    print()
    print(RULE)
    print("Invite Generated Successfully!")
    print(RULE)
    print("Invite code:")
    print(encode_invite_code(invite))
    print()
    print("Invite URL:")
    print(invite_url(invite, settings.invite_base_url))
    return 0


def cmd_invite_id(args) -> int:
    """Print the ledger identifier of an invite code."""
    try:
        invite = decode_invite_code(args.code)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    registrar_address = args.registrar or get_settings().registrar_address
    print(to_hex(invite_id_for(registrar_address, invite)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invite-registrar",
        description="Issue and inspect registrar invites",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate-invite", help="Sign a new invite")
    generate.add_argument("label", nargs="?", default="alice")
    generate.add_argument("recipient", nargs="?", default=OPEN_RECIPIENT)
    generate.add_argument("--days", type=int, default=7, help="Days until expiration")
    generate.set_defaults(func=cmd_generate_invite)

    invite_id = subparsers.add_parser("invite-id", help="Compute the identifier of an invite code")
    invite_id.add_argument("code")
    invite_id.add_argument("--registrar", help="Registrar address (defaults to settings)")
    invite_id.set_defaults(func=cmd_invite_id)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
