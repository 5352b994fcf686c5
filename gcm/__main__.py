from gcm.cli import main_cli

main_cli()
