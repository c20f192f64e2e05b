"""
Built-in tool catalog.

The order here is the order tools are listed to callers and enumerated in the
reasoning prompt.
"""

from typing import Tuple

from .models import TextTool
from .case import capitalize, randomize_case, to_lowercase, to_uppercase
from .csv_json import csv_to_json, json_to_csv, remove_csv_columns
from .lines import (
    remove_duplicates,
    remove_empty_lines,
    repeat_text,
    search_and_replace,
    sort_lines,
    trim_whitespace,
)
from .patterns import (
    convert_european_numbers,
    extract_by_pattern,
    extract_emails,
    extract_numbers,
    extract_urls,
    format_phone_numbers,
)
from .random_tools import (
    generate_lorem_ipsum,
    generate_random_letters,
    generate_random_words,
    shuffle_lines,
    shuffle_words,
)
from .segment import split_by_paragraphs, split_by_sentences
from .stats import (
    count_characters,
    count_lines,
    count_words,
    text_statistics,
    word_frequency,
)

BUILTIN_TOOLS: Tuple[TextTool, ...] = (
    # Case
    to_uppercase,
    to_lowercase,
    capitalize,
    randomize_case,
    # Lines
    remove_duplicates,
    remove_empty_lines,
    trim_whitespace,
    sort_lines,
    repeat_text,
    search_and_replace,
    # Counting / statistics
    count_words,
    count_lines,
    count_characters,
    text_statistics,
    word_frequency,
    # CSV / JSON
    csv_to_json,
    json_to_csv,
    remove_csv_columns,
    # Patterns
    extract_emails,
    extract_urls,
    extract_numbers,
    extract_by_pattern,
    format_phone_numbers,
    convert_european_numbers,
    # Segmentation
    split_by_sentences,
    split_by_paragraphs,
    # Randomization / generators
    shuffle_lines,
    shuffle_words,
    generate_lorem_ipsum,
    generate_random_words,
    generate_random_letters,
)
