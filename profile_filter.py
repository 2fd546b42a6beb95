#!/usr/bin/env python3
"""Profile tagfilter to find performance bottlenecks."""

import cProfile
import io
import pstats

from tagfilter import DEFAULT_ALLOW, DEFAULT_DENY, RuleSet, TagFilter

# Sample markup with a mix of kept and removed tags and attributes
html = """
<div class="container" id="main">
    <h1 align="center" style="color: red">Heading</h1>
    <p onclick="track()">Paragraph with <b>bold</b>, <i>italic</i> &amp; <a href="/x" target="_blank" title="t">a link</a>.</p>
    <img src="photo.jpg" alt="photo"><blink>old</blink>
    <ul type="disc"><li>one</li><li class="x">two</li></ul>
    <table><tr><td>Cell 1</td><td>Cell 2</td></tr></table>
    <script>alert("x")</script>
</div>
""" * 100  # Repeat for more meaningful results

rules = RuleSet(DEFAULT_ALLOW, DEFAULT_DENY)

# Profile
pr = cProfile.Profile()
pr.enable()

for _ in range(10):
    tag_filter = TagFilter(rules=rules)
    tag_filter.parse(html)
    _ = tag_filter.output()

pr.disable()

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(50)  # Top 50 functions
print(s.getvalue())
