# -*- coding: utf-8 -*-
"""
Tree sorting and numeral handling.

Sorting rules, highest priority first:
1. Explicit order (mapping order, then front-matter order). Nodes with an
   order always come before nodes without one.
2. Sort key derived from the file name (``01-intro``, ``1.2 Setup``,
   ``第三章``, ``（二）``).
3. Directories before files.
4. Natural, case-insensitive name comparison (``2`` before ``10``).
"""

import re
from functools import cmp_to_key
from typing import Optional

from .models import DocNode

# Digits in simplified, traditional and financial forms
CHINESE_DIGITS = {
    "零": 0, "〇": 0,
    "一": 1, "壹": 1,
    "二": 2, "贰": 2, "两": 2,
    "三": 3, "叁": 3,
    "四": 4, "肆": 4,
    "五": 5, "伍": 5,
    "六": 6, "陆": 6,
    "七": 7, "柒": 7,
    "八": 8, "捌": 8,
    "九": 9, "玖": 9,
}

CHINESE_UNITS = {
    "十": 10, "拾": 10,
    "百": 100, "佰": 100,
    "千": 1000, "仟": 1000,
    "万": 10000,
}

_NUMERAL_CHARS = "".join(CHINESE_DIGITS) + "".join(CHINESE_UNITS)
_NUM = f"[{_NUMERAL_CHARS}]+"

CHINESE_PREFIX_PATTERNS = [
    re.compile(rf"^第({_NUM})(?:章|节|部分|篇|卷)"),
    re.compile(rf"^({_NUM})、"),
    re.compile(rf"^[（(【〔\[]({_NUM})[）)】〕\]]"),
    re.compile(rf"^({_NUM})\s"),
]

ARABIC_PREFIX_PATTERN = re.compile(r"^(\d+(?:\.\d+)*)")
_DIGIT_RUN = re.compile(r"(\d+)")


def normalize_full_width(text: str) -> str:
    """Convert full-width ASCII characters and the ideographic space to half-width."""
    chars = []
    for char in text:
        code = ord(char)
        if code == 0x3000:
            chars.append(" ")
        elif 0xFF01 <= code <= 0xFF5E:
            chars.append(chr(code - 0xFEE0))
        else:
            chars.append(char)
    return "".join(chars)


def chinese_to_number(chinese: str) -> Optional[int]:
    """
    Convert a Chinese numeral string to an integer.

    Supports 零一二三四五六七八九十百千万 and their financial forms,
    e.g. 十一 -> 11, 二十三 -> 23, 三百零五 -> 305, 一万二千 -> 12000.

    Returns:
        The value, or None if the string contains anything else.
    """
    if not chinese:
        return None
    if any(char not in CHINESE_DIGITS and char not in CHINESE_UNITS for char in chinese):
        return None

    result = 0
    section = 0  # value below the current 万 boundary
    digit = 0

    for char in chinese:
        if char in CHINESE_DIGITS:
            digit = CHINESE_DIGITS[char]
            continue

        unit = CHINESE_UNITS[char]
        if unit == 10000:
            result += (section + digit) * unit
            section = 0
        else:
            section += (digit or 1) * unit
        digit = 0

    return result + section + digit


def extract_chinese_number(name: str) -> Optional[tuple[int, str]]:
    """
    Extract a leading Chinese ordinal from a name.

    Recognizes 第X章/节/部分/篇/卷, X、, bracketed forms such as （X）, (X),
    【X】, 〔X〕, [X], and a numeral followed by whitespace.

    Returns:
        Tuple of (value, rest of the name), or None.
    """
    for pattern in CHINESE_PREFIX_PATTERNS:
        match = pattern.match(name)
        if not match:
            continue
        value = chinese_to_number(match.group(1))
        if value is not None:
            return value, name[match.end():]
    return None


def extract_sort_key(name: str) -> Optional[tuple[int, ...]]:
    """
    Derive a numeric sort key from a file or directory name.

    Arabic prefixes may be dotted (``1.2.3``) and full-width; otherwise a
    Chinese ordinal prefix is used.
    """
    normalized = normalize_full_width(name)
    match = ARABIC_PREFIX_PATTERN.match(normalized)
    if match:
        return tuple(int(part) for part in match.group(1).split("."))

    chinese = extract_chinese_number(normalized)
    if chinese is not None:
        return (chinese[0],)
    return None


def compare_sort_keys(a: Optional[tuple[int, ...]], b: Optional[tuple[int, ...]]) -> int:
    """Compare sort keys; names with a key sort before names without one."""
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return (a > b) - (a < b)


def natural_key(text: str) -> list:
    """Key for natural, case-insensitive ordering."""
    parts = _DIGIT_RUN.split(normalize_full_width(text))
    return [int(part) if index % 2 else part.casefold() for index, part in enumerate(parts)]


def natural_compare(a: str, b: str) -> int:
    key_a, key_b = natural_key(a), natural_key(b)
    return (key_a > key_b) - (key_a < key_b)


def compare_nodes(a: DocNode, b: DocNode) -> int:
    """Comparison implementing the tree sort rules."""
    order_a = a.meta.effective_order
    order_b = b.meta.effective_order
    if order_a is not None or order_b is not None:
        if order_a is None:
            return 1
        if order_b is None:
            return -1
        if order_a != order_b:
            return -1 if order_a < order_b else 1

    key_comparison = compare_sort_keys(extract_sort_key(a.name), extract_sort_key(b.name))
    if key_comparison:
        return key_comparison

    if a.type != b.type:
        return -1 if a.is_dir else 1

    return natural_compare(a.name, b.name)


def sort_tree(nodes: list[DocNode]) -> list[DocNode]:
    """Sort nodes recursively, in place. Returns the same list."""
    nodes.sort(key=cmp_to_key(compare_nodes))
    for node in nodes:
        if node.children:
            sort_tree(node.children)
    return nodes
