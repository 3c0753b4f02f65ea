import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from thumbnailer.batch import run
from thumbnailer.utils.config import Config
from thumbnailer.utils.logger import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="thumbnailer", description="Apply an edit recipe to images.")
    parser.add_argument("images", nargs="+", help="image files or directories")
    parser.add_argument("--recipe", required=True, help="YAML recipe with operations and targets")
    parser.add_argument("--config", default=os.getenv("THUMBNAILER_CONFIG"))
    parser.add_argument("--workers", type=int)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)

    args = parse_args(argv)
    config = Config.load(args.config)
    setup_logging(config.logging)
    return run(recipe_path=args.recipe, images=args.images, config=config, workers=args.workers)


if __name__ == "__main__":
    sys.exit(main())
