# SPDX-License-Identifier: Apache-2.0
from orb.interfaces.ilogger import ILogger

__all__ = ["ILogger"]
