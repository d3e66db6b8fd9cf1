def main() -> None:
    """CLI entrypoint for the listeria console script."""
    from listeria.cli.app import app

    app()
