from dataset_transfer.cli import app


def main() -> None:
    """Entry point: settings and logging are set up by the CLI callback."""
    app(prog_name="dataset-transfer")


if __name__ == "__main__":
    main()
