"""Main CLI application using Cyclopts."""

import cyclopts

from cardscope.cli.commands import browse, catalog, serve

app = cyclopts.App(
    name="cardscope",
    help="cardscope - faceted card catalog browsing",
)

app.command(serve.serve, name="serve")
app.command(browse.key, name="key")
app.command(browse.plan, name="plan")
app.command(browse.cards, name="cards")
app.command(catalog.app, name="catalog")


def main() -> None:
    app()
