import argparse
import logging
import sys

from image_rewrite.config import LOG_LEVEL, PROJECT_ROOT
from image_rewrite.errors import ConfigError, TransformError
from image_rewrite.plugin import ImageTransformer
from image_rewrite.transform.image_config import get_global_config
from image_rewrite.utils.data_processor import save_file


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="image-rewrite",
        description="Rewrite Img / Svg components of react-optimized-image into multi-variant resource requests.",
    )
    parser.add_argument("file", help="JavaScript / JSX source file")
    parser.add_argument("-o", "--output", help="write the result to this file instead of stdout")
    parser.add_argument("--root", default=PROJECT_ROOT, help="project root containing images.config.json")
    return parser.parse_args(argv)


def main(argv=None):
    logging.basicConfig(stream=sys.stderr, level=LOG_LEVEL)
    args = parse_args(argv)

    try:
        transformer = ImageTransformer(global_config=get_global_config(args.root))
        result = transformer.transform_file(args.file)
    except (TransformError, ConfigError, OSError) as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.output:
        save_file(args.output, result.code.encode("utf-8"))
    else:
        sys.stdout.write(result.code)
    return 0


if __name__ == "__main__":
    sys.exit(main())
