"""CLI application for catalog REST tooling."""

import typer

from igcrest.cli.commands.assets import assets_app
from igcrest.cli.commands.relationships import rel_app
from igcrest.cli.common.logs import configure_logging
from igcrest.cli.common.options import VerboseOpt

app = typer.Typer(
    help="igcrest - metadata catalog REST tooling",
    no_args_is_help=True,
)


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging before any sub-command runs."""
    configure_logging(verbose)


app.add_typer(assets_app, name="assets")
app.add_typer(
    rel_app, name="rel", help="Append / replace / partially replace relationships."
)


if __name__ == "__main__":
    app()
