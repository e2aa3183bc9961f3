"""Initialize the ImageAI database schema."""

from imageai.config import load_config


def main() -> None:
    load_config()
    print("Database initialized.")


if __name__ == "__main__":
    main()
