# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Renders a session outcome into the single report string the host receives.

The layout is fixed and order-significant:

  <stdout>
  --- STDERR ---        (only when stderr is non-empty)
  <stderr>
  --- ERROR ---         (only when evaluation failed)
  <error message>

A library load failure is the one exception: the report is just
"Error loading standard library: <message>", with no other sections.

render_report never raises. Failures are text, not exceptions.
"""

from evalbridge.bridge.schema import SessionOutcome
from evalbridge.interpreter.exceptions import LibraryLoadError

STDERR_DELIMITER = "--- STDERR ---"
ERROR_DELIMITER = "--- ERROR ---"
LIBRARY_LOAD_PREFIX = "Error loading standard library: "


def render_report(outcome: SessionOutcome) -> str:
    """Build the host-facing report for one call."""
    error = outcome.error

    if isinstance(error, LibraryLoadError):
        return LIBRARY_LOAD_PREFIX + error.message

    output = outcome.stdout

    if outcome.stderr:
        output += f"\n{STDERR_DELIMITER}\n{outcome.stderr}"

    if error is not None:
        output += f"\n{ERROR_DELIMITER}\n{error.message}"

    return output
