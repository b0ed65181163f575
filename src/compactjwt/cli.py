"""CLI entry point: encode, decode, sign and inspect tokens."""

from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml
from dotenv import load_dotenv

from compactjwt.algorithms import sign, supported_algorithms
from compactjwt.codec import base64url_encode
from compactjwt.config import TokenSettings, get_secret, load_settings
from compactjwt.errors import TokenError
from compactjwt.token import decode, decode_unverified, encode

logger = logging.getLogger(__name__)


def _resolve_key(args_key: str | None) -> str:
    """Key from --key or the COMPACTJWT_SECRET environment variable."""
    return args_key or get_secret()


def _cmd_encode(args: argparse.Namespace, settings: TokenSettings) -> None:
    try:
        payload = json.loads(args.payload)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Payload is not valid JSON: {exc}") from exc
    algorithm = args.alg or settings.algorithm
    print(encode(payload, _resolve_key(args.key), algorithm))


def _cmd_decode(args: argparse.Namespace, settings: TokenSettings) -> None:
    verify_claims = settings.verify_claims and not args.no_verify_claims
    leeway = settings.leeway if args.leeway is None else args.leeway
    payload = decode(
        args.token,
        _resolve_key(args.key),
        verify_claims,
        leeway=leeway,
        max_depth=settings.max_depth,
    )
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _cmd_sign(args: argparse.Namespace, settings: TokenSettings) -> None:
    algorithm = args.alg or settings.algorithm
    print(base64url_encode(sign(args.message, _resolve_key(args.key), algorithm)))


def _cmd_inspect(args: argparse.Namespace, settings: TokenSettings) -> None:
    header, payload = decode_unverified(args.token, max_depth=settings.max_depth)
    print(json.dumps({"header": header, "payload": payload}, indent=2, ensure_ascii=False))


_COMMANDS = {
    "encode": _cmd_encode,
    "decode": _cmd_decode,
    "sign": _cmd_sign,
    "inspect": _cmd_inspect,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compactjwt",
        description="Encode, decode and verify HMAC-signed JSON Web Tokens",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--config", help="YAML settings file (or set COMPACTJWT_CONFIG env var)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    algs = supported_algorithms()

    encode_parser = subparsers.add_parser("encode", help="Encode a JSON payload into a token")
    encode_parser.add_argument("payload", help="Claims as a JSON object")
    encode_parser.add_argument("--key", help="Signing key (or set COMPACTJWT_SECRET)")
    encode_parser.add_argument("--alg", choices=algs, help="Signing algorithm (default from settings)")

    decode_parser = subparsers.add_parser("decode", help="Verify a token and print its claims")
    decode_parser.add_argument("token")
    decode_parser.add_argument("--key", help="Signing key (or set COMPACTJWT_SECRET)")
    decode_parser.add_argument(
        "--no-verify-claims", action="store_true",
        help="Skip iat/exp/nbf checks (signature is still verified)",
    )
    decode_parser.add_argument(
        "--leeway", type=float, default=None, help="Clock skew tolerance in seconds"
    )

    sign_parser = subparsers.add_parser("sign", help="Print the base64url HMAC of a message")
    sign_parser.add_argument("message")
    sign_parser.add_argument("--key", help="Signing key (or set COMPACTJWT_SECRET)")
    sign_parser.add_argument("--alg", choices=algs, help="Signing algorithm (default from settings)")

    inspect_parser = subparsers.add_parser(
        "inspect", help="Print header and payload WITHOUT verifying the signature"
    )
    inspect_parser.add_argument("token")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
        _COMMANDS[args.command](args, settings)
    except (TokenError, ValueError, FileNotFoundError, yaml.YAMLError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
