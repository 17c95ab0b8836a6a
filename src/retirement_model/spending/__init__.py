# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from .guardrails import GuardrailPolicy, GuardrailDecision

__all__ = ['GuardrailPolicy', 'GuardrailDecision']
