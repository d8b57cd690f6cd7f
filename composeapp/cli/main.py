"""Main CLI application using Cyclopts."""

import cyclopts

from composeapp.cli.commands import pin, publish

app = cyclopts.App(
    name="composeapp",
    help="Pin compose application images and publish them as OCI bundles",
)

app.command(pin.app, name="pin")
app.command(publish.app, name="publish")

if __name__ == "__main__":
    app()
