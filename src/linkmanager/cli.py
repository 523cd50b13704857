# src/linkmanager/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from linkmanager.controllers.link_controller import LinkController
from linkmanager.managers.config_manager import config_manager
from linkmanager.managers.database_manager import DatabaseManager
from linkmanager.managers.link_data_manager import LinkDataManager
from linkmanager.model import LinkType
from linkmanager.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

USAGE = """
Usage:
  linkmanager rewrite <file|->                       Print content with rel/target applied.
  linkmanager extract <file|->                       Print the aggregated links as JSON.
  linkmanager scan <doc_id> <file|->                 Store the links of a document.
  linkmanager remove <file>... --type <t> [--write]  Unwrap all/external/internal links.
  linkmanager report [--search S] [--domain D]       Show the link report.
  linkmanager domains                                List linked domains.
  linkmanager counts <doc_id>...                     Internal/external totals per document.
  linkmanager config list | get <key>                Show configuration.

Global options: --home-url URL, --secure, --store DIR, --set key=value (repeatable).
""".strip()


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _build_controller(pargs: argparse.Namespace) -> LinkController:
    base_dir = pargs.store or config_manager.get_nested("storage.base_dir")
    data_manager = LinkDataManager(DatabaseManager(Path(base_dir) if base_dir else None))
    return LinkController(
        data_manager,
        config_manager.get_link_settings(),
        config_manager.get_site_context(),
    )


# --- Command handlers ---

def handle_rewrite(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    sys.stdout.write(controller.rewrite_content(_read_source(pargs.source)))
    return 0


def handle_extract(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    records = controller.extractor.extract(_read_source(pargs.source))
    print(json.dumps([r.model_dump() for r in records], indent=2, ensure_ascii=False))
    return 0


def handle_scan(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    result = controller.scan_document(pargs.document_id, _read_source(pargs.source))
    print(f"✅ Document {result.document_id}: {result.found} unique links, "
          f"{result.inserted} stored, {result.failed} failed.")
    return 0 if result.failed == 0 else 1


def handle_remove(pargs: argparse.Namespace) -> int:
    if pargs.ids and len(pargs.ids) != len(pargs.sources):
        print("❌ Error: --ids must list one document id per file.")
        return 1

    ids = pargs.ids or list(range(1, len(pargs.sources) + 1))
    paths = dict(zip(ids, pargs.sources))
    documents = {doc_id: _read_source(src) for doc_id, src in paths.items()}

    controller = _build_controller(pargs)
    summary = controller.bulk_remove(documents, pargs.type, show_progress=pargs.progress)

    if pargs.write:
        for doc_id, content in summary.updated.items():
            Path(paths[doc_id]).write_text(content, encoding="utf-8")

    print(f"✅ Processed {summary.processed} document(s), removed {summary.removed} link(s), "
          f"updated {len(summary.updated)} document(s){'' if pargs.write else ' (dry run)'}.")
    return 0


def handle_report(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    per_page = pargs.per_page or config_manager.get_nested("report.per_page", 20)
    df, pagination = controller.data_manager.load_report_df(
        search=pargs.search, domain=pargs.domain, page=pargs.page, per_page=per_page
    )
    if df.empty:
        print("No links found.")
        return 0
    print(df.to_string(index=False))
    print(f"\nPage {pagination['current_page']}/{pagination['total_pages']} "
          f"({pagination['total_items']} links)")
    return 0


def handle_domains(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    for domain in controller.data_manager.get_unique_domains():
        print(domain)
    return 0


def handle_counts(pargs: argparse.Namespace) -> int:
    controller = _build_controller(pargs)
    df = controller.data_manager.load_document_link_counts_df(pargs.document_ids)
    print(df.to_string(index=False))
    return 0


def handle_config(pargs: argparse.Namespace) -> int:
    if pargs.action == "list":
        print(json.dumps(config_manager.get_all(), indent=2))
        return 0
    if not pargs.key:
        print("Usage: linkmanager config get <key>")
        return 1
    value = config_manager.get_nested(pargs.key)
    if value is None:
        print(f"❌ Error: Unknown config key '{pargs.key}'.")
        return 1
    print(json.dumps(value, indent=2) if isinstance(value, (dict, list)) else value)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linkmanager", description="Manage rel/target attributes and link data.")
    parser.add_argument("--home-url", help="Home URL of the site (overrides site.home_url).")
    parser.add_argument("--secure", action="store_true", help="Content is served over https.")
    parser.add_argument("--store", help="Directory holding the link store (overrides storage.base_dir).")
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="Override a config value for this run, e.g. links.external_ugc=true.")
    subs = parser.add_subparsers(dest="command")

    p = subs.add_parser("rewrite", help="Apply the rel/target policy.")
    p.add_argument("source", help="HTML file or '-' for stdin.")
    p.set_defaults(handler=handle_rewrite)

    p = subs.add_parser("extract", help="Print aggregated links as JSON.")
    p.add_argument("source", help="HTML file or '-' for stdin.")
    p.set_defaults(handler=handle_extract)

    p = subs.add_parser("scan", help="Extract and store the links of a document.")
    p.add_argument("document_id", type=int)
    p.add_argument("source", help="HTML file or '-' for stdin.")
    p.set_defaults(handler=handle_scan)

    p = subs.add_parser("remove", help="Unwrap links in bulk.")
    p.add_argument("sources", nargs="+", metavar="FILE")
    p.add_argument("--type", choices=[t.value for t in LinkType], default=LinkType.ALL.value)
    p.add_argument("--ids", type=int, nargs="+", help="Document ids, one per file (default: 1..N).")
    p.add_argument("--write", action="store_true", help="Write changed files back.")
    p.add_argument("--progress", action="store_true", help="Show a progress bar.")
    p.set_defaults(handler=handle_remove)

    p = subs.add_parser("report", help="Show the link report.")
    p.add_argument("--search")
    p.add_argument("--domain")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--per-page", type=int, default=None)
    p.set_defaults(handler=handle_report)

    p = subs.add_parser("domains", help="List linked domains.")
    p.set_defaults(handler=handle_domains)

    p = subs.add_parser("counts", help="Link totals per document.")
    p.add_argument("document_ids", type=int, nargs="+")
    p.set_defaults(handler=handle_counts)

    p = subs.add_parser("config", help="Show configuration.")
    p.add_argument("action", choices=["list", "get"])
    p.add_argument("key", nargs="?")
    p.set_defaults(handler=handle_config)

    return parser


def _apply_overrides(pargs: argparse.Namespace) -> bool:
    for item in pargs.overrides:
        key, sep, value = item.partition("=")
        if not sep or not key:
            print(f"❌ Error: Invalid override '{item}', expected KEY=VALUE.")
            return False
        config_manager.set_nested(key.strip(), value.strip())
    if pargs.home_url:
        config_manager.set_nested("site.home_url", pargs.home_url)
    if pargs.secure:
        config_manager.set_nested("site.secure", True)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        pargs = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        module_specific_levels=config_manager.get_nested("debug.modules", {}),
    )

    if not getattr(pargs, "handler", None):
        print(USAGE)
        return 1

    if not _apply_overrides(pargs):
        return 1

    try:
        return pargs.handler(pargs)
    except (OSError, ValueError, ValidationError) as e:
        logger.error("Command '%s' failed: %s", pargs.command, e, exc_info=True)
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
