from ec2names.cli import cli


def main():
    """Entry point for the ec2names CLI. Delegates to ec2names.cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
