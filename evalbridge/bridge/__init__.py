# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The host-facing half of evalbridge.

Subsystems:
  - schema: per-call data structures and service status
  - report: renders a session outcome into the single report string
  - registry: publishes the one host-callable entry point
  - server: HTTP adapter that carries host calls to the entry point
  - client: host-side client with readiness polling
"""
