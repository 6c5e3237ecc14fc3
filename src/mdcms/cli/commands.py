"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from mdcms.config import Settings, load_config
from mdcms.core.convert import document_to_page, page_to_document
from mdcms.core.corpus import build_listing, category_index, discover_files, read_time, scan_corpus, tag_index
from mdcms.core.errors import ContentError, FrontmatterMissing, NotFound
from mdcms.core.frontmatter import parse_file
from mdcms.core.toc import flatten, parse_document_toc
from mdcms.crud.database import drop_db, make_engine
from mdcms.crud.sql_repo import SQLRepo
from mdcms.crud.store import PageStore


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _store(settings: Settings) -> PageStore:
    """Open a loaded PageStore over the configured database."""
    store = PageStore(SQLRepo(make_engine(settings.db_url)))
    store.init()
    store.load()
    return store


def _resolve(store: PageStore, ref: str):
    """Find a page by slug, falling back to its id."""
    page = store.get_by_slug(ref)
    return page if page is not None else store.get_page(ref)


# --- markdown documents ---

def toc_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown file to read")],
    depth: Annotated[Optional[int], typer.Option("--max-depth", help="Deepest heading level to include")] = None,
    flat: Annotated[bool, typer.Option("--flat", help="Print headings as a flat list")] = False,
    ):
    """Print the table of contents of a document as JSON."""
    settings = _settings(overrides={"max_depth": depth})
    try:
        parsed = parse_file(path)
    except (OSError, FrontmatterMissing) as e:
        _fail(f"Cannot read {path}", e)
    tree = parse_document_toc(parsed.body, settings.max_depth)
    if flat:
        _echo_json([n.model_dump(exclude={"children"}) for n in flatten(tree)])
    else:
        _echo_json([n.model_dump() for n in tree])


def meta_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown file to read")],
    ):
    """Print a document's frontmatter and estimated read time as JSON."""
    settings = _settings()
    try:
        parsed = parse_file(path)
    except (OSError, FrontmatterMissing) as e:
        _fail(f"Cannot read {path}", e)
    _echo_json({
        "metadata": parsed.metadata,
        "readTime": read_time(parsed.body, settings.words_per_minute),
    })


def list_cmd(
    root: Annotated[Optional[str], typer.Argument(help="Content directory (default: content_dir)")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include draft and archived posts")] = False,
    ):
    """List posts newest first: date, slug and title."""
    settings = _settings(overrides={"content_dir": root})
    content_dir = Path(settings.content_dir)
    if not content_dir.exists():
        _fail(f"Content directory not found: {content_dir}")
    try:
        entries = scan_corpus(content_dir, words_per_minute=settings.words_per_minute)
    except (OSError, UnicodeDecodeError) as e:
        _fail("Scan failed", e)

    listing = build_listing(entries, include_drafts=drafts)
    if not listing:
        typer.echo("No documents found.")
        raise typer.Exit(1)
    for entry in listing:
        view = entry.view
        typer.echo(f"{view.published_at or '-':<12} {entry.slug}  {view.title or ''}")


def categories_cmd(
    root: Annotated[Optional[str], typer.Argument(help="Content directory (default: content_dir)")] = None,
    tags: Annotated[bool, typer.Option("--tags", help="Index tags instead of categories")] = False,
    ):
    """Print the category (or tag) index of the corpus as JSON."""
    settings = _settings(overrides={"content_dir": root})
    content_dir = Path(settings.content_dir)
    if not content_dir.exists():
        _fail(f"Content directory not found: {content_dir}")
    try:
        entries = scan_corpus(content_dir, words_per_minute=settings.words_per_minute)
    except (OSError, UnicodeDecodeError) as e:
        _fail("Scan failed", e)
    _echo_json(tag_index(entries) if tags else category_index(entries))


# --- editor pages ---

def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        drop_db(engine)
        typer.echo("Existing data cleared.")
    SQLRepo(engine).init()
    typer.echo(f"Database initialized at: {settings.db_url}")


def new_cmd(
    title: Annotated[Optional[str], typer.Option("--title", help="Page title (default: New Page)")] = None,
    ):
    """Create an unpublished page with a single heading block."""
    store = _store(_settings())
    page = store.create_page(title)
    store.persist()
    typer.echo(f"Created page {page.slug} ({page.id})")


def pages_cmd():
    """List editor pages, oldest first."""
    store = _store(_settings())
    pages = store.list_pages()
    if not pages:
        typer.echo("No pages found in database.")
        raise typer.Exit(1)
    for page in pages:
        status = "published" if page.is_published else "draft"
        typer.echo(f"{page.slug}  {status:<9}  v{page.version}  {page.title}")


def import_cmd(
    path: Annotated[Path, typer.Argument(help="File or directory of .md/.mdx documents")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Convert markdown documents into editor pages."""
    settings = _settings(overrides={"parser_config": parser})
    files = discover_files(path) if path.exists() else []
    if not files:
        _fail(f"No .md/.mdx files found at {path}")

    store = _store(settings)
    imported = 0
    for file in files:
        try:
            page = document_to_page(file.read_text(encoding="utf-8"), settings.parser_config)
        except (OSError, UnicodeDecodeError, FrontmatterMissing) as e:
            typer.echo(f"  skipped: {file} ({e})", err=True)
            continue
        store.add_page(page)
        typer.echo(f"  {file} -> {page.slug}")
        imported += 1
    store.persist()
    typer.echo(f"Imported {imported} of {len(files)} document(s)")


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    slug: Annotated[Optional[str], typer.Option("--slug", help="Export only this page")] = None,
    published: Annotated[bool, typer.Option("--published", help="Export published pages only")] = False,
    ):
    """Write pages as frontmatter + markdown .mdx files."""
    settings = _settings(overrides={"output_dir": out})
    store = _store(settings)
    try:
        pages = [_resolve(store, slug)] if slug else store.list_pages()
    except NotFound as e:
        _fail(str(e))
    if published:
        pages = [p for p in pages if p.is_published]
    if not pages:
        typer.echo("No pages to export.")
        raise typer.Exit(1)

    output_dir = Path(settings.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for page in pages:
        target = output_dir / f"{page.slug}.mdx"
        target.write_text(page_to_document(page), encoding="utf-8")
        typer.echo(f"  {page.slug} -> {target}")
    typer.echo(f"Exported {len(pages)} page(s) to {output_dir}/")


def delete_cmd(
    ref: Annotated[str, typer.Argument(help="Page slug or id")],
    ):
    """Delete a page with all of its blocks and segments."""
    store = _store(_settings())
    try:
        page = _resolve(store, ref)
        store.delete_page(page.id)
        store.persist()
    except ContentError as e:
        _fail(str(e))
    typer.echo(f"Deleted page {page.slug}")
