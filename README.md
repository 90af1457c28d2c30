# llmsupport

A library of small helpers for working with code, configuration files and
documentation in LLM-assisted workflows. Most helpers return plain,
line-oriented text (`KEY: value`) ready to print or to pass on.

Only the Python standard library is needed (3.11 or later).
`llmsupport.workspace.find_repo_root` calls the `git` program, so git must
be installed for it to find a repository.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `llmsupport.hashing`: `compute_hash`, `collect_files`, `hash_files` and
  `render_results` for md5, sha1, sha256 and sha512 checksums of files and
  directory trees.
- `llmsupport.workspace`: `init_temp` creates or cleans
  `.planning/.temp/<name>/`; `find_repo_root` asks git for the repository
  root; `check_paths` reports which of several paths exist.
- `llmsupport.report`: `generate_report` and `write_report` build a Markdown
  status report (success, partial or failed) with an optional statistics
  table; `escape_markdown`, `status_emoji`, `parse_stats`.
- `llmsupport.mathexpr`: `evaluate` safely evaluates arithmetic expressions
  (`+ - * / % **`, comparisons, and `abs`, `round`, `floor`, `ceil`, `sqrt`,
  `pow`, `min`, `max`); `format_result` formats the answer. Errors raise
  `ExpressionError`.
- `llmsupport.jsontools`: `format_json`, `query_path`, `query_file`,
  `validate_json`, `merge_json`, `count_elements`.
- `llmsupport.tomltools`: `load_toml`, `format_toml`, `query_toml`,
  `query_file`, `validate_toml`, `count_keys`.
- `llmsupport.templating`: `collect_variables` (JSON file, environment,
  `KEY=VALUE` or `KEY=@file`), `render_template` and `render_file` for
  `{{var}}` or `[[var]]` placeholders with `var|default` fallbacks.
- `llmsupport.markdown`: headers, task lists, sections by title,
  frontmatter (also as JSON) and fenced code blocks.
- `llmsupport.transform`: `csv_to_json`, `json_to_csv`, `convert_case`,
  `sort_lines`, `filter_lines`.
- `llmsupport.dirviews`: `list_directory`, `render_tree`,
  `directory_stats` and `summarize_directory` (tree, outline or full),
  skipping hidden entries and `.gitignore` matches unless told not to;
  `IgnoreRules`, `format_size`.
- `llmsupport.multigrep`: `multigrep` searches a tree for several keywords
  in parallel, separating definitions from uses; the returned
  `MultigrepReport` renders text or JSON and can write one file per keyword.
- `llmsupport.partition`: `partition_directory` reads Markdown work items,
  finds the files each mentions in backticks, and groups items that share
  no file; `Partition` renders the groups as text or JSON.

## Example

```python
from pathlib import Path

from llmsupport.hashing import compute_hash
from llmsupport.markdown import extract_tasks, tasks_report
from llmsupport.mathexpr import evaluate, format_result
from llmsupport.transform import convert_case

print(compute_hash("pyproject.toml", "sha256"))
print(format_result(evaluate("(2 + 3) * 4")))   # 20
print(convert_case("hello_world", "camelCase"))  # helloWorld

text = Path("TODO.md").read_text(encoding="utf-8")
print(tasks_report(extract_tasks(text), summary=True), end="")
```

Failures are raised as ordinary exceptions such as `ValueError`,
`FileNotFoundError`, `NotADirectoryError`, `LookupError` or
`ExpressionError`.

## What this package does not do

- It installs no command-line program; every helper is used from Python.
- It does not run prompts through LLM command-line tools, and has no
  response cache or retry logic for them.