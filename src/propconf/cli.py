"""Command line utility to encrypt, decrypt and inspect property files."""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml

from .configuration import new_configuration
from .encryption import ENCRYPT_AES_GCM, ENCRYPT_DEFAULT, ENCRYPT_NONE, AES_KEY_SIZES, decrypt, encrypt
from .exceptions import CommandError, DecryptionError, EncryptionError, PropertiesReadError
from .expander import Expander
from .properties import Properties
from .scanner import unescape
from .writer import escape_value

logger = logging.getLogger(__name__)

ALG_HELP = f"encryption algorithm to use (default {ENCRYPT_DEFAULT})"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per action."""
    parser = argparse.ArgumentParser(prog="propconf", description="Property file utility")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", metavar="command", required=True)

    cmd = commands.add_parser("decrypt", help="decrypt an encrypted property value")
    cmd.add_argument("--value", default="", help="encrypted value to decrypt (including algorithm prefix)")
    cmd.add_argument("--password", default="", help="password to decrypt the value")
    cmd.set_defaults(handler=decrypt_value)

    cmd = commands.add_parser("decryptFile", help="decrypt encrypted values in a property file")
    cmd.add_argument("--path", default="", help="properties file to decrypt")
    cmd.add_argument("--password", default="", help="password to decrypt the values")
    cmd.add_argument("--output", default="", help="output file to write results (default is input file)")
    cmd.set_defaults(handler=decrypt_file)

    cmd = commands.add_parser("encrypt", help="encrypt a value for use in a property file")
    cmd.add_argument("--value", default="", help="plaintext value to encrypt")
    cmd.add_argument("--password", default="", help="password to encrypt the value")
    cmd.add_argument("--alg", default=ENCRYPT_DEFAULT, help=ALG_HELP)
    cmd.set_defaults(handler=encrypt_value)

    cmd = commands.add_parser("encryptFile", help="encrypt plaintext values in a property file")
    cmd.add_argument("--path", default="", help="properties file to encrypt")
    cmd.add_argument("--password", default="", help="password to encrypt the values")
    cmd.add_argument("--alg", default=ENCRYPT_DEFAULT, help=ALG_HELP)
    cmd.add_argument("--output", default="", help="output file to write results (default is input file)")
    cmd.set_defaults(handler=encrypt_file)

    cmd = commands.add_parser("recrypt", help="re-encrypt a property value with a new password")
    cmd.add_argument("--value", default="", help="encrypted value to re-encrypt")
    cmd.add_argument("--oldpass", default="", help="old password to decrypt the value")
    cmd.add_argument("--newpass", default="", help="new password to re-encrypt the value")
    cmd.add_argument("--alg", default=ENCRYPT_DEFAULT, help=ALG_HELP)
    cmd.set_defaults(handler=recrypt_value)

    cmd = commands.add_parser("recryptFile", help="re-encrypt values in a property file")
    cmd.add_argument("--path", default="", help="properties file to re-encrypt")
    cmd.add_argument("--oldpass", default="", help="old password to decrypt the values")
    cmd.add_argument("--newpass", default="", help="new password to re-encrypt the values")
    cmd.add_argument("--alg", default=ENCRYPT_DEFAULT, help=ALG_HELP)
    cmd.add_argument("--output", default="", help="output file to write results (default is input file)")
    cmd.set_defaults(handler=recrypt_file)

    cmd = commands.add_parser("show", help="print the merged, expanded configuration as YAML")
    cmd.add_argument("--prefix", required=True, help="base name of the property files")
    cmd.add_argument("--profile", action="append", default=[], help="profile to apply, highest priority first")
    cmd.add_argument("--directory", default=".", help="directory containing the property files")
    cmd.set_defaults(handler=show_configuration)

    return parser


def read_password(prompt: str, exit_code: int) -> str:
    """Prompt for a password without echo.

    Raises:
        CommandError: If the password cannot be read or is empty
    """
    try:
        password = getpass.getpass(prompt)
    except (EOFError, OSError) as e:
        raise CommandError("unable to read password", exit_code, show_usage=True) from e
    if not password:
        raise CommandError("no password was provided", exit_code, show_usage=True)
    return password


def _require_alg(alg: str, exit_code: int) -> None:
    if alg != ENCRYPT_AES_GCM:
        raise CommandError(
            "the alg parameter must be an encryption algorithm id from propconf", exit_code, show_usage=True
        )


def _require_key_size(password: str, option: str, exit_code: int) -> None:
    if len(password.encode("utf-8")) not in AES_KEY_SIZES:
        raise CommandError(f"the {option} parameter must be 16, 24, or 32 bytes", exit_code, show_usage=True)


def _require_file(path: str, exit_codes: List[int]) -> None:
    if not path:
        raise CommandError("the path parameter is required", exit_codes[0], show_usage=True)
    if not Path(path).is_file():
        raise CommandError("the path parameter must be an existing, readable file", exit_codes[1], show_usage=True)


def decrypt_value(args: argparse.Namespace) -> None:
    if not args.value:
        raise CommandError("the value parameter is required", 100, show_usage=True)
    password = args.password or read_password("Password:", 100)

    try:
        print(decrypt(password, args.value))
    except DecryptionError as e:
        raise CommandError(f"decrypt error: {e}", 101) from e


def encrypt_value(args: argparse.Namespace) -> None:
    if not args.value:
        raise CommandError("the value parameter is required", 300, show_usage=True)
    password = args.password or read_password("Password:", 301)
    _require_alg(args.alg, 302)
    _require_key_size(password, "password", 303)

    try:
        print(encrypt(args.alg, password, args.value))
    except EncryptionError as e:
        raise CommandError(f"encrypt error: {e}", 304) from e


def recrypt_value(args: argparse.Namespace) -> None:
    if not args.value:
        raise CommandError("the value parameter is required", 500, show_usage=True)
    old_password = args.oldpass or read_password("Old Password:", 501)
    new_password = args.newpass or read_password("New Password:", 502)
    _require_alg(args.alg, 503)
    _require_key_size(new_password, "newpass", 504)

    try:
        plain = decrypt(old_password, args.value)
    except DecryptionError as e:
        raise CommandError(f"decrypt error: {e}", 505) from e
    try:
        print(encrypt(args.alg, new_password, plain))
    except EncryptionError as e:
        raise CommandError(f"encrypt error: {e}", 506) from e


def rewrite_lines(
    path: str,
    output: str,
    marker: str,
    rewrite: Callable[[str], str],
    exit_codes: Dict[str, int],
) -> int:
    """Rewrite the tagged part of every line that contains ``marker``.

    Each matching line is split at the first ``marker``; the text from the
    marker on is replaced by ``rewrite(text)``. Other lines are copied as is.

    Args:
        path: Property file to read
        output: File to write  # (may be the same as path)
        marker: Algorithm tag that selects the lines to rewrite
        rewrite: Conversion of the tagged text
        exit_codes: Exit codes for the "read", "write" failures

    Returns:
        Number of rewritten lines
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = [line.rstrip("\r\n") for line in f]
    except OSError as e:
        raise CommandError(f"unable to read property file: {e}", exit_codes["read"]) from e

    found = 0
    result = []
    for line in lines:
        index = line.find(marker)
        if index >= 0:
            found += 1
            line = line[:index] + rewrite(line[index:])
        result.append(line + "\n")

    try:
        with open(output or path, "w", encoding="utf-8", newline="\n") as f:
            f.writelines(result)
    except OSError as e:
        raise CommandError(f"unable to write output: {e}", exit_codes["write"]) from e

    logger.debug("Rewrote %d of %d lines from %s", found, len(lines), path)
    return found


def decrypt_file(args: argparse.Namespace) -> None:
    _require_file(args.path, [200, 201])
    password = args.password or read_password("Password:", 202)

    def rewrite(tagged: str) -> str:
        try:
            return ENCRYPT_NONE + escape_value(decrypt(password, tagged))
        except DecryptionError as e:
            raise CommandError(f"unable to decrypt property: {e}", 204) from e

    found = rewrite_lines(args.path, args.output, ENCRYPT_AES_GCM, rewrite, {"read": 203, "write": 205})
    print(f"{found} properties decrypted")


def encrypt_file(args: argparse.Namespace) -> None:
    _require_file(args.path, [400, 401])
    password = args.password or read_password("Password:", 402)
    _require_alg(args.alg, 403)

    def rewrite(tagged: str) -> str:
        try:
            return encrypt(args.alg, password, unescape(tagged[len(ENCRYPT_NONE) :]))
        except EncryptionError as e:
            raise CommandError(f"unable to encrypt property: {e}", 405) from e

    found = rewrite_lines(args.path, args.output, ENCRYPT_NONE, rewrite, {"read": 404, "write": 406})
    print(f"{found} properties encrypted")


def recrypt_file(args: argparse.Namespace) -> None:
    _require_file(args.path, [600, 601])
    _require_alg(args.alg, 602)
    old_password = args.oldpass or read_password("Old Password:", 603)
    new_password = args.newpass or read_password("New Password:", 604)

    def rewrite(tagged: str) -> str:
        try:
            plain = decrypt(old_password, tagged)
        except DecryptionError as e:
            raise CommandError(f"unable to decrypt property: {e}", 608) from e
        try:
            return encrypt(args.alg, new_password, plain)
        except EncryptionError as e:
            raise CommandError(f"unable to encrypt property: {e}", 606) from e

    found = rewrite_lines(args.path, args.output, ENCRYPT_AES_GCM, rewrite, {"read": 605, "write": 607})
    print(f"{found} properties re-encrypted")


def show_configuration(args: argparse.Namespace) -> None:
    """Print every property defined in the files, with overrides and references applied."""
    try:
        config = new_configuration(args.prefix, *args.profile, directory=args.directory, argv=[])
    except PropertiesReadError as e:
        raise CommandError(str(e), 700) from e

    names = set()
    expander: Expander = config.props
    for source in expander.source.sources:
        if isinstance(source, Properties):
            names.update(source.names())

    values = {name: config.get(name)[0] for name in names}
    print(yaml.safe_dump(values, default_flow_style=False, allow_unicode=True, sort_keys=True), end="")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line utility.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug("Running command %s", args.command)

    try:
        args.handler(args)
    except CommandError as e:
        print(e, file=sys.stderr)
        if e.show_usage:
            parser.print_usage(sys.stderr)
        return e.exit_code
    return 0
