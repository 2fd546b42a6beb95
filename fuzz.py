#!/usr/bin/env python3
"""
Random fuzzer for tagfilter.
Generates malformed markup and checks that filtering never crashes and that
filtered output is a fixed point (filtering it again changes nothing).
"""

import argparse
import random
import string
import sys
import time
import traceback

from tagfilter import DEFAULT_ALLOW, DEFAULT_DENY, RuleSet, TagFilter

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "ul", "ol", "li",
    "script", "style", "br", "hr", "h1", "h2", "h3", "b", "i", "em", "tt", "code",
    "blockquote", "blink", "marquee", "iframe", "object", "svg", "any", "none", "all",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "target", "type",
    "align", "clear", "onclick", "onMouseOver", "onerror", "disabled", "any", "all",
]

VALUES = [
    "left", "right", "center", "all", "none", "any", "_blank", "disc",
    "javascript:alert(1)", "<script>alert(1)</script>", "a&amp;b", 'say "hi"', "",
]

ENTITIES = ["&amp;", "&lt;", "&gt;", "&quot;", "&", "&#169;", "&#x1f;", "&unknown;", "&#"]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_case(text):
    return "".join(c.upper() if random.random() < 0.3 else c for c in text)


def fuzz_attribute():
    name = random_case(random.choice(ATTRIBUTES))
    value = random.choice(VALUES) if random.random() < 0.8 else random_string()
    quote_styles = [('="', '"'), ("='", "'"), ("=", ""), ("", "")]
    quote_start, quote_end = random.choice(quote_styles)
    if not quote_start:
        return name
    if quote_start == "=":
        value = value.replace(" ", "").replace(">", "")
    return f"{name}{quote_start}{value}{quote_end}"


def fuzz_open_tag():
    tag = random_case(random.choice(TAGS))
    attrs = "".join(" " + fuzz_attribute() for _ in range(random.randint(0, 5)))
    closing = random.choice([">", "/>", " />", ""])
    return f"<{tag}{attrs}{closing}"


def fuzz_close_tag():
    tag = random_case(random.choice(TAGS))
    return random.choice([f"</{tag}>", f"</{tag} >", f"</{tag}", f"</ {tag}>"])


def fuzz_text():
    parts = [random_string(0, 30), random.choice(ENTITIES), " ", "<", ">"]
    return "".join(random.choices(parts, k=random.randint(1, 6)))


def fuzz_comment():
    return random.choice([
        f"<!--{random_string()}-->",
        f"<!-- {fuzz_open_tag()} -->",
        "<!DOCTYPE html>",
        f"<?xml {random_string()}?>",
        f"<![CDATA[{random_string()}]]>",
    ])


def generate_fuzzed_html():
    """Generate a random mix of markup fragments."""
    parts = []
    for _ in range(random.randint(1, 30)):
        element_type = random.choices(
            [fuzz_open_tag, fuzz_close_tag, fuzz_text, fuzz_comment],
            weights=[20, 10, 15, 3],
        )[0]
        parts.append(element_type())
    return "".join(parts)


def filter_once(rules, html, chunk_size=None):
    tag_filter = TagFilter(rules=rules)
    if chunk_size:
        for start in range(0, len(html), chunk_size):
            tag_filter.parse(html[start:start + chunk_size])
    else:
        tag_filter.parse(html)
    return tag_filter.output()


def run_fuzzer(num_tests, seed=None, verbose=False, chunk_size=None):
    """Run the fuzzer against the default rule set."""
    if seed is not None:
        random.seed(seed)

    rules = RuleSet(DEFAULT_ALLOW, DEFAULT_DENY)
    crashes = []
    unstable = []

    print(f"Fuzzing tagfilter with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()
        try:
            once = filter_once(rules, html, chunk_size)
            twice = filter_once(rules, once, chunk_size)
        except Exception as e:
            crashes.append({"test_num": i, "html": html, "error": str(e), "traceback": traceback.format_exc()})
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        if once != twice:
            unstable.append({"test_num": i, "html": html, "once": once, "twice": twice})
            if verbose:
                print(f"  UNSTABLE: Test {i}")

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Unstable:       {len(unstable)}")
    print(f"Total time:     {elapsed_total:.2f}s")

    for crash in crashes[:10]:
        print(f"\nTest #{crash['test_num']}:")
        print(f"  HTML: {crash['html'][:200]!r}")
        print(f"  Error: {crash['error']}")
    for case in unstable[:10]:
        print(f"\nTest #{case['test_num']}:")
        print(f"  HTML:  {case['html'][:200]!r}")
        print(f"  Once:  {case['once'][:200]!r}")
        print(f"  Twice: {case['twice'][:200]!r}")

    return not crashes and not unstable


def main():
    parser = argparse.ArgumentParser(description="Fuzz tagfilter with malformed markup")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Feed input in chunks of this many characters",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no filtering)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, chunk_size=args.chunk_size)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
