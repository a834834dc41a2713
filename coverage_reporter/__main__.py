from coverage_reporter.cli import cli

cli()
