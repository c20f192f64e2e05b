"""Shuffling and random text generators.

Every tool here takes the registry's random source as ``rng``; results are
not reproducible unless the registry was built with a seeded generator.
"""

import random
import string

from ..models import RenderMode
from .args import parse_int_in_range
from .decorator import text_tool
from .models import ToolCategory

LOREM_OPENING = "Lorem ipsum dolor sit amet, consectetur adipiscing elit."

LOREM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud "
    "exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute irure "
    "in reprehenderit voluptate velit esse cillum fugiat nulla pariatur excepteur sint "
    "occaecat cupidatat non proident sunt culpa qui officia deserunt mollit anim id est laborum"
).split()

RANDOM_WORDS = (
    "apple river stone cloud garden silver window forest candle harbor meadow rocket "
    "pepper violet anchor bridge copper desert ember falcon glacier hollow island "
    "jasmine lantern marble nectar orchid pebble quartz saddle timber umbrella velvet "
    "willow yonder zephyr basket canyon dolphin engine feather harvest kettle ladder"
).split()


def _sentence(rng: random.Random) -> str:
    words = [rng.choice(LOREM_WORDS) for _ in range(rng.randint(6, 14))]
    return " ".join(words).capitalize() + "."


@text_tool(name="shuffleLines", category=ToolCategory.RANDOM)
def shuffle_lines(text: str, *, rng: random.Random) -> str:
    """Shuffle the order of lines randomly"""
    lines = text.split("\n")
    rng.shuffle(lines)
    return "\n".join(lines)


@text_tool(name="shuffleWords", category=ToolCategory.RANDOM)
def shuffle_words(text: str, *, rng: random.Random) -> str:
    """Shuffle the order of words within each line"""
    shuffled = []
    for line in text.split("\n"):
        words = line.split()
        rng.shuffle(words)
        shuffled.append(" ".join(words))
    return "\n".join(shuffled)


@text_tool(
    name="generateLoremIpsum",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.GENERATOR,
)
def generate_lorem_ipsum(text: str, paragraphs: str = "", *, rng: random.Random) -> str:
    """Generate lorem ipsum placeholder paragraphs (1-20, default 1)"""
    count = parse_int_in_range(paragraphs, 1, 20, default=1)
    if count is None:
        return "Error: Paragraph count must be a number between 1 and 20."

    result = []
    for index in range(count):
        sentences = [_sentence(rng) for _ in range(rng.randint(3, 6))]
        if index == 0:
            sentences[0] = LOREM_OPENING
        result.append(" ".join(sentences))
    return "\n\n".join(result)


@text_tool(
    name="generateRandomWords",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.GENERATOR,
)
def generate_random_words(text: str, count: str = "", *, rng: random.Random) -> str:
    """Generate a list of random words (1-500, default 10)"""
    total = parse_int_in_range(count, 1, 500, default=10)
    if total is None:
        return "Error: Word count must be a number between 1 and 500."
    return " ".join(rng.choice(RANDOM_WORDS) for _ in range(total))


@text_tool(
    name="generateRandomLetters",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.GENERATOR,
)
def generate_random_letters(text: str, length: str = "", *, rng: random.Random) -> str:
    """Generate a string of random letters (1-1000, default 10)"""
    total = parse_int_in_range(length, 1, 1000, default=10)
    if total is None:
        return "Error: Length must be a number between 1 and 1000."
    return "".join(rng.choice(string.ascii_letters) for _ in range(total))
