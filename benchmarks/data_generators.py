"""
Test data generators for JSON parsing benchmarks.

Creates JSON documents shaped like model output:
- Tool calls with small or large argument objects
- Flat objects of scalar fields
- String-heavy content with escape sequences
- Truncated prefixes of any of the above
"""

import json
import random
import string
from typing import Any

_ESCAPE_PROBABILITY = 0.3
_SEED = 20240115


def generate_test_data(data_type: str) -> str:
    """Generates JSON test data based on specified type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "flat_object": _generate_flat_object,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type](random.Random(_SEED))


def generate_truncated_data(data_type: str, fraction: float) -> str:
    """
    Cuts a generated document after the given fraction of its length.

    The prefix always keeps the opening brace.
    """
    if not 0.0 < fraction < 1.0:
        raise ValueError(f"fraction must be between 0 and 1: {fraction}")

    doc = generate_test_data(data_type)
    return doc[: max(1, int(len(doc) * fraction))]


def _generate_small_object(rng: random.Random) -> str:
    """Generates a single tool call with a handful of arguments."""
    data = {
        "tool": "get_weather",
        "arguments": {
            "city": "Lisbon",
            "units": "metric",
            "days": 3,
            "include_hourly": False,
        },
        "confidence": 0.92,
    }
    return json.dumps(data)


def _generate_large_object(rng: random.Random) -> str:
    """Generates a tool call carrying a long list of search results."""
    data = {
        "tool": "summarize_results",
        "query": _random_string(rng, 24),
        "results": [
            {
                "rank": i,
                "title": _random_string(rng, 30),
                "url": f"https://{_random_string(rng, 8).lower()}.com/{i}",
                "score": round(rng.uniform(0, 1), 4),
                "snippet": " ".join(
                    _random_string(rng, rng.randint(3, 9)) for _ in range(20)
                ),
                "cached": rng.choice([True, False, None]),
            }
            for i in range(80)
        ],
    }
    return json.dumps(data)


def _generate_flat_object(rng: random.Random) -> str:
    """Generates one object of scalar fields, the shape recovery favours."""
    data: dict[str, Any] = {}
    for i in range(150):
        match i % 5:
            case 0:
                data[f"int_{i}"] = rng.randint(-100000, 100000)
            case 1:
                data[f"float_{i}"] = round(rng.uniform(-100.0, 100.0), 3)
            case 2:
                data[f"text_{i}"] = _random_string(rng, rng.randint(5, 40))
            case 3:
                data[f"flag_{i}"] = rng.choice([True, False])
            case _:
                data[f"empty_{i}"] = None
    return json.dumps(data)


def _generate_string_heavy(rng: random.Random) -> str:
    """Generates JSON with many string escape sequences."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if rng.random() < _ESCAPE_PROBABILITY:
                chars.append(
                    rng.choice(['"', "\\", "/", "\b", "\f", "\n", "\r", "\t"])
                )
            else:
                chars.append(
                    rng.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    data = {f"message_{i}": create_escaped_string() for i in range(100)}
    return json.dumps(data)


def _random_string(rng: random.Random, length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(rng.choices(string.ascii_letters, k=length))
