"""CLI for VaultGuard — generate, score, and vault (init/add/list/audit/reveal/delete/fix/history)."""

import argparse
import asyncio
import logging
import sys
from getpass import getpass

from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .auditor import age_report, security_rating
from .config import default_vault_path, load_config
from .errors import Unauthorized, ValidationError, VaultGuardError
from .gate import Intent
from .generator import CharClass, generate, length_hint
from .models import format_timestamp
from .score import score_password
from .storage import LocalAuthenticator, LocalVaultStore
from .store import HttpAuthenticator, HttpVaultStore
from .vault import Vault

NOTIFY_STYLES = {"success": "green", "error": "red", "info": "cyan"}


def notify(level, message):
    style = NOTIFY_STYLES.get(level, "white")
    print(f"[{style}]{escape(message)}[/{style}]")


def setup_logging(args, cfg):
    level = "DEBUG" if args.verbose else str(cfg.get("log_level", "WARNING")).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def open_backend(args, cfg):
    """Return (store, authenticator) for the remote API or the local vault file."""
    api_url = args.api_url or cfg.get("api_url")
    if api_url:
        token = args.token or cfg.get("token")
        timeout = cfg.get("request_timeout")
        return (
            HttpVaultStore(api_url, token, timeout=timeout),
            HttpAuthenticator(api_url, token, timeout=timeout),
        )
    path = args.vault or cfg.get("vault_path") or default_vault_path()
    return LocalVaultStore(path), LocalAuthenticator(path)


def with_vault(coro):
    """Wrap an async command taking (vault, args) into a sync argparse handler."""
    async def runner(args):
        store, auth = open_backend(args, args.cfg)
        vault = Vault(store, auth, notify=notify)
        try:
            await vault.load()
            await coro(vault, args)
        finally:
            for collaborator in (store, auth):
                if hasattr(collaborator, "aclose"):
                    await collaborator.aclose()

    def handler(args):
        asyncio.run(runner(args))
    return handler


def strength_text(password):
    result = score_password(password)
    return f"{result['score']}/100 — {result['label']}"


def find_record(vault, password_id):
    for record in vault.records:
        if record.id == password_id:
            return record
    raise ValidationError(f"No password with id {password_id}")


async def pass_gate(vault, record, intent):
    """Prompt until the master password matches or the user enters nothing."""
    vault.gate.request_access(record, intent)
    while vault.gate.pending:
        master = getpass("Master password (blank to cancel): ")
        if not master:
            vault.gate.cancel()
            print("Cancelled.")
            return False
        vault.gate.enter(master)
        if await vault.gate.submit():
            return True
    return False


def cmd_generate(args):
    classes = [c for c, off in (
        (CharClass.LOWERCASE, args.no_lower),
        (CharClass.UPPERCASE, args.no_upper),
        (CharClass.NUMBERS, args.no_digits),
        (CharClass.SYMBOLS, args.no_symbols),
    ) if not off]
    length = args.length if args.length is not None else int(args.cfg.get("generator_length", 16))
    for i in range(args.copies):
        pw = generate(length=length, classes=classes)
        print(f"[bold green]Password #{i+1}:[/bold green] {escape(pw)}  "
              f"[dim]({length_hint(len(pw))}, {strength_text(pw)})[/dim]")


def cmd_score(args):
    result = score_password(args.password)
    header = f"Score: {result['score']} / 100 — {result['label']}"
    print(Panel(result["feedback"], title=header))


def cmd_init(args):
    if args.api_url or args.cfg.get("api_url"):
        print("[red]init only applies to a local vault; the remote backend manages its own master password.[/red]")
        return 1
    path = args.vault or args.cfg.get("vault_path") or default_vault_path()
    auth = LocalAuthenticator(path)
    master = getpass("Enter new master password: ")
    confirm = getpass("Confirm master password: ")
    if master != confirm:
        print("[red]Master password mismatch — aborting.[/red]")
        return 1
    auth.setup_master_password(master)
    print(f"[green]Created vault at:[/green] {path}")


@with_vault
async def cmd_add(vault, args):
    password = args.password
    if args.generate:
        password = generate(length=int(args.cfg.get("generator_length", 16)))
        print(f"[bold green]Generated:[/bold green] {escape(password)}")
    elif not password:
        password = getpass("Password (input hidden): ")
    record = await vault.add(
        args.name,
        password,
        category=args.category,
        account_name=args.account or "",
        url=args.url,
    )
    print(f"[dim]id {record.id} — strength {strength_text(record.password)}[/dim]")


@with_vault
async def cmd_list(vault, args):
    records = vault.search(args.search or "")
    if not records:
        print("[yellow]No passwords found.[/yellow]")
        return
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Account")
    table.add_column("Category")
    table.add_column("Updated")
    for r in records:
        table.add_row(r.id, escape(r.name), escape(r.account_name), r.category.value, format_timestamp(r.updated_at) or "")
    print(table)


@with_vault
async def cmd_audit(vault, args):
    snapshot = vault.audit()
    header = f"Security score: {snapshot.security_score} / 100 — {security_rating(snapshot.security_score)}"
    print(Panel("\n".join(snapshot.summary()), title=header))

    for title, dist in (
        ("Strength", snapshot.strength_distribution),
        ("Category", snapshot.category_distribution),
        ("Age", age_report(vault.records)),
    ):
        if not dist:
            continue
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Bucket")
        table.add_column("Count", justify="right")
        for bucket, count in dist.items():
            table.add_row(bucket, str(count))
        print(table)

    flagged = Table(title="Needs attention", show_header=True, header_style="bold red")
    flagged.add_column("ID")
    flagged.add_column("Name")
    flagged.add_column("Issues")
    issues = {}
    for kind, records in (("weak", snapshot.weak), ("old", snapshot.old), ("duplicate", snapshot.duplicates)):
        for r in records:
            issues.setdefault(r.id, (r, []))[1].append(kind)
    for rid, (r, kinds) in issues.items():
        flagged.add_row(rid, escape(r.name), ", ".join(kinds))
    if issues:
        print(flagged)


@with_vault
async def cmd_reveal(vault, args):
    record = find_record(vault, args.id)
    if not await pass_gate(vault, record, Intent.REVEAL):
        return
    shown = vault.revealed
    body = f"Password: {escape(shown.password)}\nStrength: {strength_text(shown.password)}"
    if shown.account_name:
        body = f"Account: {escape(shown.account_name)}\n" + body
    if shown.url:
        body += f"\nURL: {escape(shown.url)}"
    if shown.last_viewed:
        body += f"\nLast viewed: {format_timestamp(shown.last_viewed)}"
    print(Panel(body, title=escape(shown.name)))
    vault.close_reveal()


@with_vault
async def cmd_delete(vault, args):
    record = find_record(vault, args.id)
    await pass_gate(vault, record, Intent.DELETE)


@with_vault
async def cmd_fix(vault, args):
    record = find_record(vault, args.id)
    if not await pass_gate(vault, record, Intent.FIX):
        return
    print(f"Fixing [bold]{escape(record.name)}[/bold] (current strength {strength_text(record.password)})")
    if args.generate:
        new_password = generate(length=int(args.cfg.get("generator_length", 16)))
        print(f"[bold green]Generated:[/bold green] {escape(new_password)}")
    else:
        new_password = getpass("New password: ")
    try:
        await vault.remediation.save(new_password)
    finally:
        vault.remediation.cancel()
    print(f"New security score: {vault.audit().security_score} / 100")


@with_vault
async def cmd_history(vault, args):
    record = find_record(vault, args.id)
    if not await pass_gate(vault, record, Intent.REVEAL):
        return
    vault.close_reveal()
    entries = await vault.history(record)
    if not entries:
        print("[yellow]No previous passwords.[/yellow]")
        return
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Replaced at")
    table.add_column("Previous value")
    for e in entries:
        table.add_row(format_timestamp(e.created_at) or "", escape(e.value))
    print(table)


def build_parser():
    parser = argparse.ArgumentParser(prog="vaultguard")
    parser.add_argument("--vault", "-f", type=str, help="Path to local vault file")
    parser.add_argument("--api-url", type=str, help="Vault backend base URL (uses the local file when omitted)")
    parser.add_argument("--token", type=str, help="Backend access token (or set VAULTGUARD_TOKEN)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate one or more passwords")
    gen.add_argument("--length", type=int, help="Password length (8-32)")
    gen.add_argument("--no-symbols", action="store_true", help="Disable symbols")
    gen.add_argument("--no-upper", action="store_true", help="Disable uppercase")
    gen.add_argument("--no-lower", action="store_true", help="Disable lowercase")
    gen.add_argument("--no-digits", action="store_true", help="Disable digits")
    gen.add_argument("--copies", type=int, default=1, help="How many passwords to generate")
    gen.set_defaults(func=cmd_generate)

    sc = sub.add_parser("score", help="Score a password")
    sc.add_argument("password", type=str, help="Password to evaluate (wrap in quotes)")
    sc.set_defaults(func=cmd_score)

    init = sub.add_parser("init", help="Set up the master password of a local vault")
    init.set_defaults(func=cmd_init)

    add = sub.add_parser("add", help="Save a password to the vault")
    add.add_argument("name", type=str, help="Device or application name")
    add.add_argument("--category", choices=["application", "device"], default="application")
    add.add_argument("--account", type=str, help="Username or email (applications)")
    add.add_argument("--url", type=str, help="Application URL")
    add.add_argument("--password", type=str, help="Password (avoid passing via CLI in public shells)")
    add.add_argument("--generate", action="store_true", help="Generate the password")
    add.set_defaults(func=cmd_add)

    ls = sub.add_parser("list", help="List saved passwords (values hidden)")
    ls.add_argument("--search", "-s", type=str, help="Filter by name, account or category")
    ls.set_defaults(func=cmd_list)

    au = sub.add_parser("audit", help="Security audit of the whole vault")
    au.set_defaults(func=cmd_audit)

    for name, func, help_text in (
        ("reveal", cmd_reveal, "Show a password (master password required)"),
        ("delete", cmd_delete, "Delete a password (master password required)"),
        ("history", cmd_history, "Show previous values (master password required)"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id", type=str, help="Password id (see list)")
        p.set_defaults(func=func)

    fix = sub.add_parser("fix", help="Replace a flagged password (master password required)")
    fix.add_argument("id", type=str, help="Password id (see list or audit)")
    fix.add_argument("--generate", action="store_true", help="Use a generated password")
    fix.set_defaults(func=cmd_fix)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    args.cfg = load_config()
    setup_logging(args, args.cfg)
    try:
        return args.func(args) or 0
    except Unauthorized as e:
        print(f"[red]{escape(str(e))} — set up the vault or log in again.[/red]")
        return 2
    except VaultGuardError as e:
        print(f"[red]{escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
