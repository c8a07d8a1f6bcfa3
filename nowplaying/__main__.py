from .service import cli

cli()
