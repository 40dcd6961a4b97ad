from loguru import logger

from content_tree.cli import app


def main() -> None:
    logger.debug("content-tree started")
    app()


if __name__ == "__main__":
    main()
