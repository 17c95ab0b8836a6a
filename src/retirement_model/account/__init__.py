# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

from .contributions import classify_account, ScheduledContribution, ContributionLedger

__all__ = ['classify_account', 'ScheduledContribution', 'ContributionLedger']
