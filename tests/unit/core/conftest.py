"""Shared fixtures for core unit tests"""

import pytest


SAMPLE_POST = """\
---
title: Getting Started with Acme
publishedAt: 2024-03-01
summary: A short tour
categories: [Guides, Tools]
tags: [python, "markdown"]
---

# Introduction

Some intro text with **bold** words.

## Install

```bash
# not a heading
pip install acme
```

## Usage

### Advanced usage
"""


@pytest.fixture(name="sample_post")
def sample_post_fixture():
    return SAMPLE_POST


@pytest.fixture(name="corpus_dir")
def corpus_dir_fixture(tmp_path):
    """A small content tree: dated posts, a draft, an undated post and a broken file."""
    root = tmp_path / "content"
    (root / "guides").mkdir(parents=True)
    (root / "first.md").write_text(
        "---\ntitle: First\npublishedAt: 2024-01-10\ncategory: News\ntags: [intro]\n---\n\nHello world.\n"
    )
    (root / "guides" / "second.mdx").write_text(
        "---\ntitle: Second\npublishedAt: 2024-02-20\ncategories: [Guides, News]\ntags: [python, intro]\n---\n\n# Guide\n"
    )
    (root / "draft.md").write_text(
        "---\ntitle: Draft\npublishedAt: 2024-05-01\nstatus: draft\n---\n\nWork in progress.\n"
    )
    (root / "undated.md").write_text("---\ntitle: Undated\n---\n\nNo date here.\n")
    (root / "broken.md").write_text("# No frontmatter\n\nJust text.\n")
    (root / "notes.txt").write_text("ignored\n")
    return root
