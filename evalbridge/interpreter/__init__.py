# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The embedded interpreter and the per-call evaluation session.

Subsystems:
  - engine: the Interpreter protocol and the default Python implementation
  - library: the standard symbol library loaded into every fresh namespace
  - session: one isolated interpreter plus two output buffers per call
  - exceptions: LibraryLoadError and EvaluationError
"""
