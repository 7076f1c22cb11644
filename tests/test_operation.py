from lzmacodec.operation import Lit, Match


def test_match_length_and_str():
    m = Match(distance=5, n=10)
    assert len(m) == 10
    assert str(m) == "M{5,10}"


def test_lit_length():
    assert len(Lit(ord("a"))) == 1


def test_lit_str_printable():
    assert str(Lit(ord("a"))) == "L{a/61}"


def test_lit_str_non_printable():
    assert str(Lit(0)) == "L{./00}"


def test_equality():
    assert Match(3, 4) == Match(3, 4)
    assert Lit(7) == Lit(7)
    assert Match(3, 4) != Match(4, 3)