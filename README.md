# gonkey

`gonkey` provides the pieces for functional tests of an HTTP API whose tests
are described in YAML files: reading and expanding the test files,
substituting variables, building the HTTP requests, extracting values from
responses, and reporting results on the console or as an Allure report.

## Describing tests

A test file holds a list of test definitions:

```yaml
- name: create order
  method: POST
  path: /orders
  query: ?lang=en
  headers:
    Content-Type: application/json
  request: '{"amount": {{ .amount }}}'
  response:
    200: '{"status": "ok"}'
  variables_to_set:
    200:
      orderId: id
  cases:
    - requestArgs:
        amount: 1
    - requestArgs:
        amount: 5
      variables:
        note: second case
```

- `cases` turns one definition into several tests, one per case, named
  `<name> #1`, `<name> #2` and so on. `requestArgs` fill the `{{ .arg }}`
  placeholders of the path, query, request body, headers and cookies;
  `responseArgs` (keyed by status code) those of responses and response
  headers; `dbQueryArgs`, `dbResponseArgs`, `beforeScriptArgs` and
  `afterRequestScriptArgs` those of the matching parts.
- `{{ $name }}` placeholders are variables, substituted by
  `gonkey.variables.Variables`. Values come from `variables` (and the
  `variables` of cases, accumulated into `combined_variables`), from values
  extracted from responses, or from the environment. A placeholder whose
  variable is unknown is left as it is.
- `variables_to_set` maps a status code either to a single variable name
  (for a plain-text body) or to variable names with dot-separated JSON paths.
- `form.files` marks a test to be sent as `multipart/form-data` with the
  named files attached.

## Modules

- `gonkey.loader.YamlFileLoader(location, file_filter="")` reads a single
  YAML file, or walks a directory for `.yaml` and `.yml` files; `load()`
  returns `gonkey.testcase.ApiTest` objects.
- `gonkey.yaml_parser.parse_test_definition_file(path)` reads one file;
  `substitute_args` and `make_tests_from_definition` do the case expansion.
- `gonkey.variables.Variables` holds variables: `load`, `set`, `add`,
  `merge`, `perform(text)` and `apply(test)`, which returns a substituted
  copy of a test.
- `gonkey.response_parser.from_response(vars_to_set, body, is_json)` builds
  `Variables` from a response body; `json_path_get(body, path)` looks up a
  single path.
- `gonkey.request.build_request(host, test)` prepares a `requests`
  request; `new_session(proxy_url=None)` gives a session that skips TLS
  verification and does not follow redirects; `request_body_text` returns the
  body sent.
- `gonkey.console_handler.ConsoleHandler` runs a test through an executor
  function and counts passed, failed, skipped (`TestSkipped`) and broken
  (`TestBroken`) tests; `summary()` returns a `Summary`.
- `gonkey.console_output.ConsoleColoredOutput(verbose=False)` prints a dot
  per passing `Result` and a full report of each failing one;
  `show_summary(summary)` prints the totals.
- `gonkey.allure.AllureReportOutput(suite_name, directory)` records each
  result as an Allure test case with attachments; `finalize()` writes the
  suite file. `gonkey.beans` holds the report data.
- `gonkey.xmlparsing.parse` turns an XML document into nested dictionaries,
  with repeated elements as lists and attributes under `-attrs`.

## Putting them together

```python
from gonkey.console_handler import ConsoleHandler, Result, TestBroken, TestSkipped
from gonkey.console_output import ConsoleColoredOutput
from gonkey.loader import YamlFileLoader
from gonkey.request import build_request, new_session, request_body_text
from gonkey.variables import Variables

variables = Variables()
session = new_session()
handler = ConsoleHandler()
output = ConsoleColoredOutput()


def execute(test):
    if test.status == "skipped":
        raise TestSkipped()
    if test.status == "broken":
        raise TestBroken()
    variables.load(test.combined_variables)
    test = variables.apply(test)
    prepared = build_request("http://localhost:8080", test)
    response = session.send(prepared)
    result = Result(
        path=test.path,
        query=test.query,
        request_body=request_body_text(prepared),
        response_body=response.text,
        response_status_code=response.status_code,
        response_status=f"{response.status_code} {response.reason}",
        test=test,
    )
    expected = test.get_response(response.status_code)
    if expected is None:
        result.errors.append(Exception(f"unexpected status {response.status_code}"))
    output.process(test, result)
    return result


for test in YamlFileLoader("tests/cases").load():
    handler.handle_test(test, execute)

output.show_summary(handler.summary())
```

## What the package does not do

There is no test runner that drives a whole run, and no command-line tool:
the loop above has to be written by the caller. The package does not compare
response bodies or headers with the expected ones, does not run database
checks, does not load fixtures, does not start mock services and does not run
the before/after scripts named in test files; those fields are only read and
have their placeholders substituted.