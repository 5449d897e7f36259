"""
Command-line front end: pick a model, embed a text and compare it against
other texts or against a sentence-transformers reference embedding.
"""

import argparse
import logging
import sys

import settings
from errors import EmbedderError
from extractor import extract
from model_catalog import MODEL_OPTIONS, get_model_option, is_large_model
from model_store import ModelStore
from similarity import COARSE_BANDS, DETAILED_BANDS, compare, rank_references
from text_embedder import load_text_embedder

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="embed-text", description=__doc__)
    parser.add_argument("text", nargs="?", help="Text to embed")
    parser.add_argument("--model", default=settings.MODEL, help="Catalog index or label (default: %(default)s)")
    parser.add_argument("--list-models", action="store_true", help="List the model catalog and exit")
    parser.add_argument("--compare", action="append", default=[], metavar="TEXT", help="Text to compare against (repeatable)")
    parser.add_argument("--coarse", action="store_true", help="Use the coarse similarity bands")
    parser.add_argument("--reference", action="store_true", help="Compare against a sentence-transformers embedding")
    parser.add_argument("--cache-dir", default=settings.CACHE_DIR, help="Download cache (default: %(default)s)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    return parser


def print_models() -> None:
    for i, option in enumerate(MODEL_OPTIONS):
        note = " [~470MB]" if is_large_model(option) else ""
        print(f"{i}: {option.label} - {option.description}{note}")


def run(args: argparse.Namespace) -> int:
    option = get_model_option(args.model)
    store = ModelStore(args.cache_dir)
    if is_large_model(option) and not store.is_cached(option.repo, option.file_name):
        logger.warning(f"{option.label} is approximately 470MB and may take a few minutes to download")
    embedder = load_text_embedder(option, store)
    bands = COARSE_BANDS if args.coarse else DETAILED_BANDS

    embedding = embedder.embed(args.text)
    preview = ", ".join(f"{v:.4f}" for v in embedding[:PREVIEW_SIZE])
    print(f"Model: {option.label}")
    print(f"Dimensions: {len(embedding)}")
    print(f"Preview: [{preview}, ...]")

    if args.compare:
        vectors = embedder.embed_batch(args.compare)
        references = dict(zip(args.compare, vectors))
        for other, result in rank_references(embedding, references, bands=bands):
            print(f"{result.score:.4f} ({result.label}) - {other}")

    if args.reference:
        from reference_embedder import ReferenceEmbedder

        reference = ReferenceEmbedder(cache_folder=args.cache_dir)
        pooled = compare(embedding, reference.embed(args.text), bands)
        print(f"{pooled.score:.4f} ({pooled.label}) - reference {reference.model_name}")
        cls_state = compare(embedding, extract(reference.embed_tokens(args.text)), bands)
        print(f"{cls_state.score:.4f} ({cls_state.label}) - reference {reference.model_name} [CLS]")
    return 0


def main(argv: list[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings.configure_logging(args.log_level.upper())

    if args.list_models:
        print_models()
        return 0
    if not args.text:
        parser.error("text is required unless --list-models is given")

    try:
        return run(args)
    except EmbedderError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
