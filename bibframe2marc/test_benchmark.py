# coding: utf-8

import logging

from bibframe2marc.benchmark import Timer, timed


def test_timer():
    with Timer() as timer:
        sum(range(1000))
    assert timer.elapsed_s >= 0
    assert timer.end >= timer.start


def test_timed_logs_and_returns(caplog):
    @timed
    def add(a, b):
        return a + b

    with caplog.at_level(logging.DEBUG, logger='bibframe2marc'):
        assert add(1, 2) == 3
    assert any('add' in r.getMessage() for r in caplog.records)


def test_timed_slow(caplog):
    @timed(slow=-1)
    def noop():
        pass

    with caplog.at_level(logging.INFO, logger='bibframe2marc'):
        noop()
    assert [r.levelno for r in caplog.records] == [logging.INFO]
    assert '(slow)' in caplog.records[0].getMessage()
