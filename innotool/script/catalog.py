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

"""Catalog of generated Pascal code modules.

Each module is a self-contained Pascal routine that the code generator
places into the [Code] section when the project's build level requires it.
Line 0 of every module is the auto-generated marker comment; line 1 is the
routine signature, which identifies the module inside a script. A signature
found without the marker on the line above belongs to the script author and
is never touched.

Catalog order matters: Pascal requires a routine to be declared before use,
so helpers come before the routines that call them.

Modules:
    RunAndCaptureOutput: Run a program and collect its console output.
    ExtractMajorVersion: Major number of a dotted version string.
    IsDotnetRuntimeInstalled: Ask "dotnet --list-runtimes" for a desktop runtime.
    NeedsDotNet: Check function used by the runtime install step in [Run].
    PrepareToInstall: Download the runtime installer into {tmp} when needed
        (NET_INSTALL_DOWNLOAD only).
"""

from __future__ import annotations

from dataclasses import dataclass
import re
import textwrap

from innotool.policy.build_level import BuildLevel

AUTOGENERATED_TAG = "innotool:auto-generated"
AUTOGENERATED_PATTERN = re.compile(
    r"^\s*\{\s*" + re.escape(AUTOGENERATED_TAG) + r"\b", re.IGNORECASE
)


def marker_line(name: str) -> str:
    return f"{{ {AUTOGENERATED_TAG} {name} }}"


def is_marker(line: str) -> bool:
    """True if line is an auto-generated marker comment."""
    return bool(AUTOGENERATED_PATTERN.match(line))


@dataclass(frozen=True)
class CodeModule:
    """One generated Pascal routine.

    Attributes:
        name: Routine name, also used in the marker comment.
        build_level: Minimum build level that requires this routine.
        lines: Marker line, signature line, then the body.
    """

    name: str
    build_level: BuildLevel
    lines: tuple[str, ...]

    @property
    def signature(self) -> str:
        return self.lines[1]

    def matches_signature(self, line: str) -> bool:
        return line.strip().lower() == self.signature.strip().lower()


def _module(name: str, build_level: BuildLevel, source: str) -> CodeModule:
    body = textwrap.dedent(source).strip("\n").splitlines()
    return CodeModule(name, build_level, (marker_line(name), *body))


CODE_MODULES: tuple[CodeModule, ...] = (
    _module(
        "RunAndCaptureOutput",
        BuildLevel.NET_INSTALL_INCLUDED,
        r"""
        function RunAndCaptureOutput(const FileName, Params: String; var Output: TArrayOfString): Boolean;
        var
          ResultCode: Integer;
          OutputFile: String;
        begin
          Result := False;
          OutputFile := ExpandConstant('{tmp}\innotool-output.txt');
          if Exec(ExpandConstant('{cmd}'), '/C ""' + FileName + '" ' + Params + ' > "' + OutputFile + '" 2>&1"', '', SW_HIDE, ewWaitUntilTerminated, ResultCode) then
            Result := (ResultCode = 0) and LoadStringsFromFile(OutputFile, Output);
          DeleteFile(OutputFile);
        end;
        """,
    ),
    _module(
        "ExtractMajorVersion",
        BuildLevel.NET_INSTALL_INCLUDED,
        r"""
        function ExtractMajorVersion(const Version: String): Integer;
        var
          Dot: Integer;
        begin
          Dot := Pos('.', Version);
          if Dot > 0 then
            Result := StrToIntDef(Copy(Version, 1, Dot - 1), 0)
          else
            Result := StrToIntDef(Version, 0);
        end;
        """,
    ),
    _module(
        "IsDotnetRuntimeInstalled",
        BuildLevel.NET_INSTALL_INCLUDED,
        r"""
        function IsDotnetRuntimeInstalled(const Major: Integer): Boolean;
        var
          Output: TArrayOfString;
          Prefix: String;
          I: Integer;
        begin
          Result := False;
          Prefix := 'Microsoft.WindowsDesktop.App ' + IntToStr(Major) + '.';
          if RunAndCaptureOutput('dotnet', '--list-runtimes', Output) then
          begin
            for I := 0 to GetArrayLength(Output) - 1 do
            begin
              if Pos(Prefix, Output[I]) = 1 then
              begin
                Result := True;
                Break;
              end;
            end;
          end;
          Log(Format('.NET Desktop Runtime %d installed: %d', [Major, Ord(Result)]));
        end;
        """,
    ),
    _module(
        "NeedsDotNet",
        BuildLevel.NET_INSTALL_INCLUDED,
        r"""
        function NeedsDotNet: Boolean;
        begin
          Result := not IsDotnetRuntimeInstalled(ExtractMajorVersion('{RuntimeVersion}'));
        end;
        """,
    ),
    _module(
        "PrepareToInstall",
        BuildLevel.NET_INSTALL_DOWNLOAD,
        r"""
        function PrepareToInstall(var NeedsRestart: Boolean): String;
        begin
          Result := '';
          if NeedsDotNet then
          begin
            try
              DownloadTemporaryFile('{RuntimeDownloadUrl}', '{RuntimeInstallerName}', '', nil);
            except
              Result := 'Unable to download the .NET Desktop Runtime: ' + GetExceptionMessage;
            end;
          end;
        end;
        """,
    ),
)


def modules_for(
    build_level: BuildLevel, catalog: tuple[CodeModule, ...] = CODE_MODULES
) -> list[CodeModule]:
    """Catalog entries required at build_level, in catalog order."""
    return [module for module in catalog if module.build_level <= build_level]
