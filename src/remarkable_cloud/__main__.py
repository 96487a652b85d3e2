from .cli import app


def main() -> None:
    app(prog_name="remarkable-cloud")


if __name__ == "__main__":
    main()
