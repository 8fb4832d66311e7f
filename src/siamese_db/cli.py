from __future__ import annotations

import argparse
import sys

from siamese_db.db.factory import SUPPORTED_BACKENDS


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to TOML/YAML/JSON config file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")


def _add_cifar_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="ARG",
        help="input_folder output_folder db_type train_pairs test_pairs",
    )
    parser.add_argument("--max-pairs", type=int, help="Cap the number of pairs written per split")
    parser.add_argument(
        "--lenient-pairs",
        action="store_true",
        help="Parse pair file tokens like atoi (non-numeric tokens become 0)",
    )
    parser.add_argument("--report", help="Also write the JSON summary to this path")
    _add_common_args(parser)


def _add_imageset_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="ARG",
        help="ROOTFOLDER/ LISTFILE PAIRFILE DB_NAME",
    )
    parser.add_argument("--gray", action="store_true", help="Treat images as grayscale ones")
    parser.add_argument(
        "--shuffle",
        action="store_true",
        help="Randomly shuffle the order in which pairs are written",
    )
    parser.add_argument("--shuffle-seed", "--shuffle_seed", dest="shuffle_seed", type=int, help="Seed for --shuffle")
    parser.add_argument("--backend", choices=list(SUPPORTED_BACKENDS), help="Storage backend (default lmdb)")
    parser.add_argument("--resize-width", "--resize_width", dest="resize_width", type=int, help="Width images are resized to")
    parser.add_argument("--resize-height", "--resize_height", dest="resize_height", type=int, help="Height images are resized to")
    parser.add_argument(
        "--check-size",
        "--check_size",
        dest="check_size",
        action="store_true",
        help="Check that all records have the same data size",
    )
    parser.add_argument("--encoded", action="store_true", help="Store the encoded images instead of raw pixels")
    parser.add_argument(
        "--encode-type",
        "--encode_type",
        dest="encode_type",
        help="Encoding to store images as ('png', 'jpg', ...)",
    )
    parser.add_argument("--commit-every", "--commit_every", dest="commit_every", type=int, help="Records per transaction")
    parser.add_argument(
        "--lenient-pairs",
        action="store_true",
        help="Parse pair file tokens like atoi (non-numeric tokens become 0)",
    )
    parser.add_argument("--report", help="Also write the JSON summary to this path")
    _add_common_args(parser)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="siamese-db",
        description="Build siamese pair databases (LMDB/LevelDB) from CIFAR-10 and image lists",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    cifar = subparsers.add_parser("cifar", help="Convert CIFAR-10 binary batches with train/test pair files")
    _add_cifar_args(cifar)

    imageset = subparsers.add_parser("imageset", help="Convert an image list with a pair file")
    _add_imageset_args(imageset)

    inspect = subparsers.add_parser("inspect", help="Summarize a siamese database")
    inspect.add_argument("db_path", help="Database directory")
    inspect.add_argument("--backend", choices=list(SUPPORTED_BACKENDS), help="Storage backend")
    inspect.add_argument("--limit", type=int, help="Stop after this many records")
    _add_common_args(inspect)

    make_pairs = subparsers.add_parser("make-pairs", help="Generate a balanced random pair file")
    source = make_pairs.add_mutually_exclusive_group(required=True)
    source.add_argument("--cifar-batch", action="append", help="CIFAR binary batch file (repeatable)")
    source.add_argument("--list-file", help="Image list file ('path label' per line)")
    make_pairs.add_argument("--output", required=True, help="Pair file to write")
    make_pairs.add_argument("--count", type=int, help="Number of pairs (default: one per sample)")
    make_pairs.add_argument("--seed", type=int, help="Random seed")
    make_pairs.add_argument("--positive-fraction", type=float, default=0.5, help="Share of same-label pairs")
    _add_common_args(make_pairs)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "cifar":
        from siamese_db.commands.cifar import run_cifar

        return run_cifar(args)
    if args.command == "imageset":
        from siamese_db.commands.imageset import run_imageset

        return run_imageset(args)
    if args.command == "inspect":
        from siamese_db.commands.inspect import run_inspect

        return run_inspect(args)
    if args.command == "make-pairs":
        from siamese_db.commands.pairs import run_make_pairs

        return run_make_pairs(args)

    parser.error(f"Unknown command: {args.command}")
    return 2


def convert_cifar_data_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="convert_cifar_data")
    _add_cifar_args(parser)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    from siamese_db.commands.cifar import run_cifar

    return run_cifar(args)


def convert_imageset_main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="convert_imageset")
    _add_imageset_args(parser)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    from siamese_db.commands.imageset import run_imageset

    return run_imageset(args, usage=parser.format_help())


if __name__ == "__main__":
    raise SystemExit(main())
