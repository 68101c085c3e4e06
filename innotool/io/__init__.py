# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""File transfer helpers for innotool.

Public API:

download_file : function
    Download a file from a URL with retries and atomic writes.
ensure_runtime_installer : function
    Return a cached .NET runtime installer, downloading it when missing.
make_session : function
    requests.Session preconfigured with retry/backoff.
"""

from .download import download_file, ensure_runtime_installer, make_session

__all__ = ["download_file", "ensure_runtime_installer", "make_session"]
