import argparse
import os
import time

from glove.config import GloveConfig
from glove.errors import UnknownTokenError
from glove.model import Glove

# Entry point: fit and train on demo text or a file, time each phase, print queries.
# Usage: python -m glove.run [--file path] [--query quantum] [--analogy quantum mechanics atom]

DEMO_TEXT = """
quantum mechanics describes the behaviour of atoms and electrons
an electron bound in an atom absorbs photons of light
quantum theory explains how photons carry energy
atoms emit light when their electrons lose energy
classical mechanics fails for electrons inside atoms
the energy of a photon depends on its frequency
""".replace("\n", " ").strip()


def _timed(label: str, fn):
    start = time.perf_counter()
    result = fn()
    print(f"{label:<12s}{time.perf_counter() - start:10.4f}s")
    return result


def _show(results) -> None:
    for word, score in results:
        print(f"  {word:>20s}  {score:.4f}")


def main(argv=None):
    """Train GloVe vectors on demo text or a file; print timings, similar words and analogies."""
    defaults = GloveConfig()
    ap = argparse.ArgumentParser()
    ap.add_argument("--text", type=str, default=None, help="Train on this string")
    ap.add_argument("--file", type=str, default=None, help="Train on file (one big text)")
    ap.add_argument("--window", type=int, default=defaults.window)
    ap.add_argument("--min-count", type=int, default=2)
    ap.add_argument("--max-count", type=int, default=defaults.max_count)
    ap.add_argument("--lr", type=float, default=defaults.learning_rate)
    ap.add_argument("--alpha", type=float, default=defaults.alpha)
    ap.add_argument("--dim", type=int, default=defaults.num_components)
    ap.add_argument("--epochs", type=int, default=defaults.epochs)
    ap.add_argument("--threads", type=int, default=defaults.threads)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--raw", action="store_true", help="Skip stemming, stop words and length/alphabetic filters")
    ap.add_argument("--query", nargs="*", default=None, help="Words to find similar words for")
    ap.add_argument("--num", type=int, default=3)
    ap.add_argument("--analogy", nargs=3, metavar=("WORD1", "WORD2", "TARGET"), default=None)
    ap.add_argument("--save-dir", type=str, default=None, help="Write corpus, matrix, vectors and biases here")
    args = ap.parse_args(argv)

    config = GloveConfig(
        window=args.window,
        min_count=args.min_count,
        max_count=args.max_count,
        learning_rate=args.lr,
        alpha=args.alpha,
        num_components=args.dim,
        epochs=args.epochs,
        threads=args.threads,
        seed=args.seed,
    )
    if args.raw:
        config = config.update(stem=False, stop_words=False, normalize=False, alphabetic=False)

    if args.file:
        with open(args.file, encoding="utf-8") as f:
            text = f.read()
    else:
        text = args.text or DEMO_TEXT

    model = Glove(config)
    _timed("Fit text", lambda: model.fit(text))
    print(f"Token pairs: {len(model.token_pairs)}, unique tokens: {model.vocab_size}")
    _timed("Train", model.train)

    queries = args.query if args.query is not None else list(model.token_index)[:3]
    for word in queries:
        print(f"Most similar to '{word}':")
        try:
            _timed("Similarity", lambda: _show(model.most_similar(word, args.num)))
        except UnknownTokenError as e:
            print(f"  {e}")

    if args.analogy:
        word1, word2, target = args.analogy
        print(f"What {args.num} words relate to {target} like {word1} relates to {word2}?")
        try:
            _timed("Analogy", lambda: _show(model.analogy_words(word1, word2, target, args.num)))
        except UnknownTokenError as e:
            print(f"  {e}")

    if args.save_dir:
        os.makedirs(args.save_dir, exist_ok=True)
        paths = [os.path.join(args.save_dir, name) for name in ("corpus.json", "cooc.npy", "words.npy", "biases.npy")]
        model.save(*paths)
        print(f"Saved model to {args.save_dir}")
    return model


if __name__ == "__main__":
    main()
