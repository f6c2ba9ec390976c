from movies.core.slugs import generate_slug


def test_simple_title():
    assert generate_slug("The Matrix", 1999) == "the-matrix-1999"


def test_punctuation_and_non_ascii_are_dropped():
    assert generate_slug("Léon: The Professional", 1994) == "lon-the-professional-1994"


def test_space_runs_collapse_to_one_hyphen():
    assert generate_slug("Star   Wars", 1977) == "star-wars-1977"


def test_hyphens_and_underscores_survive():
    assert generate_slug("Spider-Man_2", 2004) == "spider-man_2-2004"


def test_same_input_same_slug():
    assert generate_slug("Up", 2009) == generate_slug("Up", 2009)
