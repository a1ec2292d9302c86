# ghtp

`ghtp` runs `terraform plan` or `tofu plan` in the current directory, saves the plan
file, and writes the human-readable plan output into a Markdown file. The output sits
inside a collapsed `<details>` block with a `terraform` code fence, ready to paste into
the body of a pull request:

````
<details><summary>Terraform plan</summary>

```terraform
...plan output...
```

</details>
````

With `tofu` the summary reads `OpenTofu plan`.

## Installation

```
pip install .
```

This installs the `tp` command. Install with `pip install .[test]` to get `pytest` for
the test suite.

## Usage

Run a plan in a directory that holds `.tf` or `.tofu` files:

```
tp -o plan.out -m plan.md
```

This runs `<binary> plan -no-color -input=false -detailed-exitcode -out=<planFile>`,
then `<binary> show -no-color <planFile>`, and writes the shown text to the Markdown
file. If the plan fails, the plan file is removed. If you press Ctrl+C during the plan,
the plan file is removed and `tp` exits quietly.

Read plan output that you already have from standard input:

```
terraform show -no-color plan.out | tp - -m plan.md
```

Standard input must be a pipe or a redirect, and must not be empty. A binary is still
determined in this mode, and its name chooses the Markdown title.

When a run succeeds, `tp` reports each file it made:

```
✔  Plan Created...
✔  Markdown Created...
```

A file that is missing afterwards is reported as `✕  <kind> Failed to Create`.
Colour is used only on a terminal and not when `NO_COLOR` is set.

On failure `tp` prints `Error: <message>` to standard error and exits with status 1.

### Options

| Option | Meaning |
| --- | --- |
| `-b`, `--binary` | `terraform` or `tofu`. It must be on your `PATH`. |
| `-o`, `--planFile` | Name of the plan file to create, for example `plan.out`. |
| `-m`, `--mdFile` | Name of the Markdown file to create, for example `plan.md`. |
| `-c`, `--config` | Use this config file instead of searching for one. It must exist. |
| `-v`, `--verbose` | Turn on debug logging. |
| `--version` | Print the version, operating system and architecture. |

If no binary is given, `tp` looks for `tofu` and `terraform` on your `PATH`. When
exactly one of them is there, it uses that one. When both are there, or neither, it
stops with an error.

Plan and Markdown file names must be plain file names in the current directory
(`./plan.out` is accepted as `plan.out`). They may contain only letters, digits, `_`,
`-` and `.`, and may be at most 255 characters long.

## Configuration

Settings can also come from a `.tp.toml` file. Without `--config`, `tp` uses the first
one it finds in:

1. the current directory (the project root),
2. `gh-tp/.tp.toml` under your user config directory (`$XDG_CONFIG_HOME`, or
   `~/.config`, on Linux),
3. your home directory.

A malformed file found this way is an error.

Each setting is taken from the first of these that provides it: the command-line
option, an environment variable named after the setting in upper case (`BINARY`,
`PLANFILE`, `MDFILE`, `VERBOSE`), then the config file.

```toml
# binary: (type: string) The name of the binary, expect either 'tofu' or 'terraform'. Must exist on your $PATH.
binary = "terraform"
# planFile: (type: string) The name of the plan file created by 'gh tp'.
planFile = "plan.out"
# mdFile: (type: string) The name of the Markdown file created by 'gh tp'.
mdFile = "plan.md"
# verbose: (type: bool) Enable Verbose Logging. Default is false.
verbose = false
```

To create this file with prompts, run:

```
tp init
```

(`tp i` works too.) It asks which of the three locations above to save the file in
(the project root is the default), which binary to use (`terraform` by default), and
what to call the plan and Markdown files. Both names are required and must differ. It
then asks for confirmation before creating the file, or before overwriting one that
already exists; an overwritten file is first copied to `<path>-YYYYMMDDHHMM`. If you
decline, the generated configuration is only logged. New files are written with mode
`0600`.

## Environment

- `GH_TP_INIT_DEBUG`: when true (`1`, `t`, `true`, ...), turn on debug logging before
  the configuration is read.
- `BINARY`, `PLANFILE`, `MDFILE`, `VERBOSE`: override the config file, as above.
- `NO_COLOR`: turn off coloured status marks.

## Using it from Python

- `ghtp.markdown.render_markdown(plan_str, binary_name)` returns the Markdown text;
  `create_markdown(md_param, plan_str, binary_name)` writes it to a file in the current
  directory and returns the file name (nothing is written for an empty plan).
- `ghtp.tools.validate_file_path(path)` returns the cleaned file name or raises
  `ghtp.errors.FilePathError`.
- `ghtp.tf.create_plan(binary, plan_file)` runs the plan and returns the shown text.
- `ghtp.settings.load_settings(config_file, flags)` resolves settings as described above.
- `ghtp.cli.run(settings, args, stdin)` does what the `tp` command does.

All errors derive from `ghtp.errors.TpError`.

## What it does not do

`tp` writes files only. It does not open or update pull requests; paste or attach the
Markdown file yourself. `tp init` uses plain line prompts rather than a full-screen form.