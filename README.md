# nelly

nelly runs small scripts that describe how a git repository should be set
up. A script names a repository and a branch, then goes on with variables,
loops, conditions and commands.

## Installing

    pip install .

## Running a script

    nelly setup.nelly

If the file cannot be read or does not parse, nelly prints the problem to
standard error and exits with status 1. Errors raised while the script runs
are reported as runtime errors.

## The language

Every script starts with a `repo` line and then a `branch` line:

    repo "my-project"
    branch "main"

    let names = ["alpha", "beta"]
    for name in names {
        createBranch .name name
        track .name name
    }

    if true {
        print("done")
    } else {
        print("skipped")
    }

- If the repository is an `http://`, `https://` or `git@` address, it is
  cloned and the branch is checked out. Otherwise a repository is
  initialised in that directory, and the branch is created, tracked and
  pushed.
- `let name = value` binds a variable.
- `for x in array { ... }` runs its body once for each item of an array.
- `if cond { ... } else { ... }` needs a boolean condition.
- Commands are written as a name followed by options in the form
  `.option value`. An option given without a value is set to `true`.
- Values can be strings, numbers, `true`/`false`, arrays, semantic versions
  such as `v1.2.3`, and calls to `len(...)` and `print(...)`.
- Lines beginning with `//` are comments.

## Using it from Python

    from nelly.grammar import parse_script
    from nelly.interpreter import register_default_commands, execute_program
    from nelly.state import ExecutionState

    program = parse_script(source)
    register_default_commands()
    execute_program(program, ExecutionState())

`parse_script` raises `ParseError` on bad input. Running a program raises
`InterpreterError` or `EvalError` when something goes wrong.

## Running the tests

    pip install ".[test]"
    pytest