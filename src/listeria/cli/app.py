from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from listeria.clients.mediawiki_api import MediaWikiClient, wiki_api_url
from listeria.clients.wikibase_api import SparqlClient, StubEntityLoader, WikibaseClient
from listeria.config.logging_config import configure_logging
from listeria.services.column_spec import parse_columns
from listeria.services.errors import ListeriaError
from listeria.services.list_builder import ListeriaList

app = typer.Typer(help="Listeria CLI (render Wikidata-driven lists).")
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    wikitext = "wikitext"
    tabbed = "tabbed"


def _wiki_api(server: str) -> MediaWikiClient:
    return MediaWikiClient(wiki_api_url(server))


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        err_console.print(f"[red]✗[/red] Cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command("render")
def render_cmd(
    params_file: Path = typer.Option(..., "--params-file", help="JSON object of list template options."),
    results_file: Optional[Path] = typer.Option(
        None, "--results-file", help="Saved SPARQL JSON results; the query is run when omitted."
    ),
    entities_file: Optional[Path] = typer.Option(
        None, "--entities-file", help="JSON object of Wikibase entities used instead of the live API."
    ),
    wiki: Optional[str] = typer.Option(
        None, "--wiki", help="Wiki the list is rendered for (default: from --wiki-server, else enwiki)."
    ),
    page: str = typer.Option("", "--page", help="Title of the page holding the list."),
    wiki_server: Optional[str] = typer.Option(
        None, "--wiki-server", help="Server of the target wiki (e.g. en.wikipedia.org), for page and file checks."
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.wikitext, "--format", help="Output format."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LISTERIA_LOG_LEVEL."),
) -> None:
    """Render one list from its template options."""
    configure_logging(log_level)

    template_params = _read_json(params_file)
    if not isinstance(template_params, dict):
        err_console.print("[red]✗[/red] Error: params file must hold a JSON object")
        raise typer.Exit(1)
    template_params = {str(k): str(v) for k, v in template_params.items()}

    wikibase = None
    if entities_file is not None:
        loader = StubEntityLoader(entities=_read_json(entities_file))
    else:
        wikibase = WikibaseClient()
        loader = wikibase
    wiki_api = _wiki_api(wiki_server) if wiki_server else None

    try:
        language = None
        if wiki_api is not None:
            info = wiki_api.site_info()
            wiki = wiki or info["wiki"]
            language = info["language"] or None
        listeria = ListeriaList.from_template(
            template_params,
            wiki or "enwiki",
            entity_loader=loader,
            wiki_api=wiki_api,
            page_title=page,
            language=language,
        )
        if results_file is not None:
            sparql_json = _read_json(results_file)
        else:
            sparql_json = SparqlClient().query(listeria.params.sparql)
        listeria.process(sparql_json)

        if output_format == OutputFormat.tabbed:
            typer.echo(json.dumps(listeria.as_tabbed_data(), ensure_ascii=False, indent=2))
        else:
            typer.echo(listeria.as_wikitext())
    except ListeriaError as e:
        err_console.print(f"[red]✗[/red] Error: {e}")
        raise typer.Exit(1)
    finally:
        if wikibase is not None:
            wikibase.close()
        if wiki_api is not None:
            wiki_api.close()


@app.command("columns")
def columns_cmd(
    spec: str = typer.Argument(..., help="Comma separated column list, e.g. 'item,P31:instance of'."),
) -> None:
    """Show how a `columns` option resolves."""
    table = Table(title="Columns")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("Key", style="green")
    table.add_column("Label", style="yellow")

    for i, column in enumerate(parse_columns(spec)):
        table.add_row(str(i), type(column.obj).__name__, column.obj.as_key(), column.label)

    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
