# SPDX-License-Identifier: Apache-2.0
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Orb policy layer: persona classification, action constraint evaluation and
mode transition validation.
"""

from pathlib import Path

from orb.session import PolicySession

REPO_ROOT = Path(__file__).resolve().parents[1]

__all__ = ["PolicySession", "REPO_ROOT"]
