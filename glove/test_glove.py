import numpy as np
import pytest

import glove.eval as queries
from glove.config import GloveConfig
from glove.cooccurrence import build_cooccurrence_matrix, cooccurrence_column, nonzero_entries
from glove.corpus import Corpus
from glove.errors import (
    DegenerateNormError,
    EmptyVocabularyError,
    NotFittedError,
    UnknownTokenError,
    UntrainedQueryError,
)
from glove.model import Glove
from glove.parallel import partition
from glove.parser import Parser, stem_word
from glove.train import Trainer

# Unit tests: vocabulary, pairs, co-occurrence, sparse entries, training, queries, IO.

FOX = "the quick brown fox jumped over the lazy dog"

TOKENS = (
    "king queen royal palace king crown queen royal king palace crown "
    "dog cat pet house dog cat pet dog house cat king dog queen cat"
).split()


def _trained(tokens=TOKENS, **overrides) -> Glove:
    opts = dict(min_count=1, num_components=8, epochs=2, threads=2, seed=7, verbose=False)
    opts.update(overrides)
    return Glove(**opts).fit(tokens).train()


def test_corpus_count_index_and_pairs():
    corpus = Corpus.from_text(FOX, window=3, min_count=2, stop_words=False)
    assert corpus.count == {"the": 2}
    assert corpus.index == {"the": 0}
    assert corpus.pairs[0].neighbors == ["quick", "brown", "fox"]
    assert corpus.pairs[-1].neighbors == ["fox", "jump", "over", "lazi", "dog"]


def test_corpus_neighbors_window():
    corpus = Corpus.from_text(FOX, min_count=1, stop_words=False)
    assert corpus.neighbors(4) == ["brown", "fox", "over", "the"]


def test_vocabulary_ids_dense_and_filtered():
    tokens = ["a", "b", "a", "c", "b", "a", "d", "e", "e"]
    corpus = Corpus.build(tokens, min_count=2)
    assert corpus.index == {"a": 0, "b": 1, "e": 2}
    assert sorted(corpus.index.values()) == list(range(corpus.vocab_size))
    assert "c" not in corpus.count
    # pairs only for kept occurrences
    assert [p.token for p in corpus.pairs] == ["a", "b", "a", "b", "a", "e", "e"]


def test_pairs_exclude_center_value_and_keep_repeats():
    corpus = Corpus.build(["x", "y", "x", "y"], window=2, min_count=1)
    assert corpus.pairs[0].neighbors == ["y"]
    assert corpus.pairs[1].neighbors == ["x", "x"]


def test_empty_token_sequence():
    corpus = Corpus.build([], min_count=1)
    assert corpus.index == {}
    assert corpus.pairs == []
    assert build_cooccurrence_matrix(corpus.pairs, corpus.index, threads=2).shape == (0, 0)


def test_partition_covers_range():
    assert partition(10, 3) == [(0, 3), (3, 6), (6, 10)]
    assert partition(2, 4) == [(0, 2)]
    assert partition(0, 2) == []
    with pytest.raises(ValueError):
        partition(5, 0)


def test_cooccurrence_counts_neighbours():
    corpus = Corpus.build(TOKENS, window=2, min_count=1)
    matrix = build_cooccurrence_matrix(corpus.pairs, corpus.index, threads=2)
    V = corpus.vocab_size
    assert matrix.shape == (V, V)
    for y, iy in corpus.index.items():
        for x, ix in corpus.index.items():
            expected = sum(p.neighbors.count(x) for p in corpus.pairs if p.token == y)
            assert matrix[iy, ix] == expected
    assert np.all(np.diag(matrix) == 0)


def test_cooccurrence_sequential_matches_partitioned():
    corpus = Corpus.build(TOKENS, window=3, min_count=1)
    sequential = build_cooccurrence_matrix(corpus.pairs, corpus.index, threads=1)
    for threads in (2, 3, 50):
        np.testing.assert_array_equal(
            build_cooccurrence_matrix(corpus.pairs, corpus.index, threads=threads), sequential
        )


def test_cooccurrence_column():
    corpus = Corpus.build(TOKENS, window=2, min_count=1)
    matrix = build_cooccurrence_matrix(corpus.pairs, corpus.index)
    col = cooccurrence_column(corpus.pairs, corpus.index, "cat")
    np.testing.assert_array_equal(col, matrix[:, corpus.index["cat"]])


def test_nonzero_entries_example():
    entries = nonzero_entries(np.array([[0.0, 9.0], [3.0, 0.0]]))
    assert {tuple(e) for e in entries.tolist()} == {(0, 1), (1, 0)}


def test_nonzero_entries_exact():
    corpus = Corpus.build(TOKENS, window=2, min_count=1)
    matrix = build_cooccurrence_matrix(corpus.pairs, corpus.index)
    entries = nonzero_entries(matrix)
    assert entries.shape == (np.count_nonzero(matrix), 2)
    assert np.all(matrix[entries[:, 0], entries[:, 1]] != 0)


def test_cosine_properties():
    a = np.array([1.0, 2.0, 3.0])
    b = np.array([-2.0, 0.5, 4.0])
    assert queries.cosine(a, a) == pytest.approx(1.0)
    assert queries.cosine(a, b) == queries.cosine(b, a)
    assert queries.cosine(None, a) == 0.0
    assert queries.cosine(a, np.zeros(3)) == 0.0


def test_vector_distance_ties_keep_vocab_order():
    index = {"a": 0, "b": 1, "c": 2, "d": 3}
    vectors = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 1.0], [1.0, 1.0]])
    ranked = queries.vector_distance(vectors, index, "a")
    assert [w for w, _ in ranked] == ["d", "b", "c"]
    assert ranked[0][1] == pytest.approx(1 / np.sqrt(2))
    with pytest.raises(UnknownTokenError):
        queries.vector_distance(vectors, index, "zzz")


def test_analogy_words_excludes_entries_near_reference(monkeypatch):
    distances = [("electron", 0.98583), ("radiation", 0.99998)]
    monkeypatch.setattr(queries, "cosine", lambda v1, v2: 0.99999)
    monkeypatch.setattr(queries, "vector_distance", lambda vectors, index, word: distances)
    words = [w for w, _ in queries.analogy_words(np.zeros((1, 1)), {}, "quantum", "physics", "atom")]
    assert "electron" in words
    assert "radiation" not in words


def test_approximate_read_and_update_formula():
    cooc = np.array([[0.0, 50.0], [10.0, 0.0]])
    vectors = np.array([[1.0, 2.0], [3.0, 4.0]])
    biases = np.array([0.5, -0.5])
    trainer = Trainer(cooc, vectors, biases, learning_rate=0.1, alpha=0.75, max_count=100, threads=1)
    loss, a_norm, b_norm = trainer.approximate_concurrent_read(0, 1)
    expected_loss = 0.5**0.75 * (10.0 - np.log(50.0))
    assert loss == pytest.approx(expected_loss)
    assert a_norm == pytest.approx(np.sqrt(5.0))
    assert b_norm == pytest.approx(5.0)

    step = 0.1 * loss
    w1 = (np.array([1.0, 2.0]) - step * np.array([3.0, 4.0])) / a_norm
    w2 = (np.array([3.0, 4.0]) - step * np.array([3.0, 4.0])) / b_norm
    with trainer.lock:
        trainer.apply_update(0, 1, loss, a_norm, b_norm)
    np.testing.assert_allclose(vectors[0], w1)
    np.testing.assert_allclose(vectors[1], w2)
    np.testing.assert_allclose(biases, [0.5 - step, -0.5 - step])


def test_zero_norm_aborts_epoch():
    cooc = np.array([[0.0, 2.0], [3.0, 0.0]])
    trainer = Trainer(cooc, np.zeros((2, 4)), np.zeros(2), threads=2, rng=np.random.default_rng(0))
    with pytest.raises(DegenerateNormError):
        trainer.run_epoch(nonzero_entries(cooc))


def test_single_thread_epoch_visits_every_entry_once(monkeypatch):
    visited = []
    real_apply = Trainer.apply_update

    def recording(self, w1, w2, loss, a_norm, b_norm):
        visited.append((int(w1), int(w2)))
        real_apply(self, w1, w2, loss, a_norm, b_norm)

    monkeypatch.setattr(Trainer, "apply_update", recording)
    tokens = ["the", "quick", "brown", "fox"] * 3
    model = Glove(min_count=1, threads=1, epochs=1, num_components=6, seed=1, verbose=False).fit(tokens)
    model.train()
    entries = [tuple(e) for e in nonzero_entries(model.cooc_matrix).tolist()]
    assert model.vocab_size == 4
    assert sorted(visited) == sorted(entries)
    assert model.word_vec.shape == (4, 6)
    assert model.word_biases.shape == (4,)


def test_writes_hold_lock_and_reads_do_not(monkeypatch):
    reads, writes = [], []
    real_read = Trainer.approximate_concurrent_read
    real_apply = Trainer.apply_update

    def recording_read(self, w1, w2):
        reads.append(self.lock.locked())
        return real_read(self, w1, w2)

    def recording_apply(self, w1, w2, loss, a_norm, b_norm):
        writes.append(self.lock.locked())
        real_apply(self, w1, w2, loss, a_norm, b_norm)

    monkeypatch.setattr(Trainer, "approximate_concurrent_read", recording_read)
    monkeypatch.setattr(Trainer, "apply_update", recording_apply)

    _trained(threads=1, epochs=1)
    assert reads and writes
    assert not any(reads)
    assert all(writes)

    # with several workers another one may hold the lock during a read
    reads.clear()
    writes.clear()
    model = _trained(threads=3, epochs=2)
    nnz = len(nonzero_entries(model.cooc_matrix))
    assert len(reads) == len(writes) == 2 * nnz
    assert all(writes)


def test_entries_reshuffled_every_epoch(monkeypatch):
    orders = []
    real_epoch = Trainer.run_epoch
    real_apply = Trainer.apply_update

    def recording_epoch(self, entries):
        orders.append([])
        return real_epoch(self, entries)

    def recording_apply(self, w1, w2, loss, a_norm, b_norm):
        orders[-1].append((int(w1), int(w2)))
        real_apply(self, w1, w2, loss, a_norm, b_norm)

    monkeypatch.setattr(Trainer, "run_epoch", recording_epoch)
    monkeypatch.setattr(Trainer, "apply_update", recording_apply)
    _trained(threads=1, epochs=3, seed=11)
    assert len(orders) == 3
    assert len(orders[0]) > 10
    assert sorted(orders[0]) == sorted(orders[1]) == sorted(orders[2])
    assert orders[0] != orders[1]
    assert orders[1] != orders[2]


def test_training_history_counts_entries():
    model = _trained(threads=3, epochs=3)
    nnz = len(nonzero_entries(model.cooc_matrix))
    assert [h["epoch"] for h in model.history] == [1, 2, 3]
    assert all(h["entries"] == nnz for h in model.history)
    assert all(type(h["loss"]) is float and np.isfinite(h["loss"]) for h in model.history)
    assert np.all(np.isfinite(model.word_vec))


def test_training_reproducible_with_seed_single_thread():
    m1 = _trained(threads=1, seed=3)
    m2 = _trained(threads=1, seed=3)
    np.testing.assert_array_equal(m1.word_vec, m2.word_vec)
    np.testing.assert_array_equal(m1.word_biases, m2.word_biases)


def test_most_similar_excludes_word_and_is_sorted():
    model = _trained()
    result = model.most_similar("king", num=4)
    assert 0 < len(result) <= 4
    assert "king" not in [w for w, _ in result]
    scores = [s for _, s in result]
    assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_most_similar_stems_query_word():
    text = "foxes jumped over dogs while dogs jumped over foxes and foxes jumped again"
    model = Glove(min_count=1, stop_words=False, epochs=1, seed=0, verbose=False).fit(text).train()
    assert "jump" in model.token_index
    words = [w for w, _ in model.most_similar("jumping", num=10)]
    assert "jump" not in words
    assert len(words) == model.vocab_size - 1


def test_analogy_words_ignores_second_word():
    model = _trained()
    expected = queries.analogy_words(model.word_vec, model.token_index, "king", "king", "dog", num=3)
    assert model.analogy_words("king", "cat", "dog") == expected
    assert model.analogy_words("king", "palace", "dog") == expected


def test_negative_num_rejected():
    model = _trained()
    with pytest.raises(ValueError):
        queries.most_similar(model.word_vec, model.token_index, "king", num=-1)
    with pytest.raises(ValueError):
        queries.analogy_words(model.word_vec, model.token_index, "king", "queen", "dog", num=-1)
    with pytest.raises(ValueError):
        model.most_similar("king", num=-1)
    with pytest.raises(ValueError):
        model.analogy_words("king", "queen", "dog", num=-1)
    assert model.most_similar("king", num=0) == []


def test_transform_unknown_word_returns_none():
    model = _trained()
    assert model.transform("unicorn") is None
    np.testing.assert_array_equal(model.transform("dog"), model.word_vec[model.token_index["dog"]])
    with pytest.raises(KeyError):
        model.most_similar("unicorn")


def test_error_kinds():
    with pytest.raises(NotFittedError):
        Glove(verbose=False).train()

    empty = Glove(min_count=5, verbose=False).fit(["a", "b", "a"])
    assert empty.cooc_matrix.shape == (0, 0)
    with pytest.raises(EmptyVocabularyError):
        empty.train()

    untrained = Glove(min_count=1, verbose=False).fit(TOKENS)
    with pytest.raises(UntrainedQueryError):
        untrained.most_similar("king")
    with pytest.raises(UntrainedQueryError):
        untrained.analogy_words("king", "queen", "dog")


def test_config_defaults_and_validation():
    cfg = GloveConfig()
    assert (cfg.window, cfg.min_count, cfg.max_count) == (2, 5, 100)
    assert (cfg.learning_rate, cfg.alpha, cfg.num_components) == (0.05, 0.75, 30)
    assert (cfg.epochs, cfg.threads) == (5, 2)
    assert Glove(threads=4).config.threads == 4
    with pytest.raises(ValueError):
        GloveConfig(threads=0)
    with pytest.raises(ValueError):
        GloveConfig(num_components=0)
    with pytest.raises(TypeError):
        Glove(bogus=1)


def test_parser_pipeline():
    tokens = Parser("the quick brown Fx jumps over the lazy d0g").tokenize()
    assert tokens == ["quick", "brown", "jump", "lazi"]
    assert "b2b" not in Parser("b2b sales 42 times").alphabetic().split()
    assert Parser("a bb ccc dddd", stop_words=False, stem=False).tokenize() == ["ccc", "dddd"]
    assert stem_word("jumps") == "jump"


def test_save_load_round_trip(tmp_path):
    model = _trained()
    paths = [str(tmp_path / name) for name in ("corpus.json", "cooc.npy", "words.npy", "biases.npy")]
    model.save(*paths)
    loaded = Glove(verbose=False).load(*paths)
    assert loaded.token_index == model.token_index
    np.testing.assert_array_equal(loaded.cooc_matrix, model.cooc_matrix)
    np.testing.assert_array_equal(loaded.word_vec, model.word_vec)
    np.testing.assert_array_equal(loaded.word_biases, model.word_biases)
    assert loaded.config.num_components == 8
    assert loaded.most_similar("dog") == model.most_similar("dog")


def test_load_rejects_shape_mismatch(tmp_path):
    model = _trained()
    paths = [str(tmp_path / name) for name in ("corpus.json", "cooc.npy", "words.npy", "biases.npy")]
    model.save(*paths)
    with open(paths[3], "wb") as f:
        np.save(f, np.zeros(3))
    with pytest.raises(ValueError):
        Glove(verbose=False).load(*paths)


def test_save_requires_training(tmp_path):
    model = Glove(min_count=1, verbose=False).fit(TOKENS)
    with pytest.raises(UntrainedQueryError):
        model.save(*(str(tmp_path / n) for n in ("c.json", "m.npy", "w.npy", "b.npy")))


def test_run_main_demo(capsys):
    from glove.run import main

    model = main(["--epochs", "1", "--threads", "1", "--analogy", "quantum", "mechanics", "atom"])
    out = capsys.readouterr().out
    assert model.trained
    assert "Train" in out
    assert "Most similar to" in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
