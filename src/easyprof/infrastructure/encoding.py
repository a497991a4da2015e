"""Profile encoders: binary, text, folded stacks.

Binary: gzip-compressed JSON document (always starts with the gzip magic).
Text: human-readable rendering starting with "<name> profile: total N".
Folded: one "root;...;leaf count" line per stack, for flame graph tools.

Encoders write to a binary sink and let OSError propagate; the caller
translates it into FlushError.
"""

from __future__ import annotations

import gzip
import json
from typing import TYPE_CHECKING, BinaryIO, Final

if TYPE_CHECKING:
    from easyprof.domain.model.profile import Frame, Profile

FORMAT_NAME: Final = "easyprof"
FORMAT_VERSION: Final = 1
GZIP_MAGIC: Final = b"\x1f\x8b"


def write_binary(profile: Profile, sink: BinaryIO) -> None:
    """Write compact binary encoding of profile.

    Layout: gzip(JSON) with a string table for file and function names,
    frames referenced by index.
    """
    strings: dict[str, int] = {"": 0}
    frames: dict[Frame, int] = {}

    def intern(value: str) -> int:
        return strings.setdefault(value, len(strings))

    def frame_id(frame: Frame) -> int:
        if frame not in frames:
            frames[frame] = len(frames)
            intern(frame.function)
            intern(frame.filename)
        return frames[frame]

    samples = [
        {"stack": [frame_id(f) for f in sample.stack], "values": list(sample.values)}
        for sample in profile.samples
    ]
    document = {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "name": profile.name,
        "time_ns": profile.time_ns,
        "duration_ns": profile.duration_ns,
        "period": profile.period,
        "sample_types": [[st.type, st.unit] for st in profile.sample_types],
        "strings": list(strings),
        "frames": [[strings[f.function], strings[f.filename], f.line] for f in frames],
        "samples": samples,
    }
    payload = json.dumps(document, separators=(",", ":")).encode("utf-8")
    # mtime=0 keeps output reproducible for identical profiles
    sink.write(gzip.compress(payload, mtime=0))


def write_text(profile: Profile, sink: BinaryIO) -> None:
    """Write human-readable rendering of profile.

    Format:
        <name> profile: total <sum of first value>
        # <type>/<unit> ...
        <values> @ <n> frames
        #\t<function>\t<file>:<line>
    Samples ordered by first value, descending.
    """
    lines = [
        f"{profile.name} profile: total {profile.total()}",
        "# " + " ".join(f"{st.type}/{st.unit}" for st in profile.sample_types),
    ]
    if profile.period:
        lines.append(f"# period {profile.period}")

    ordered = sorted(profile.samples, key=lambda s: s.values[0], reverse=True)
    for sample in ordered:
        lines.append("")
        values = " ".join(str(v) for v in sample.values)
        lines.append(f"{values} @ {len(sample.stack)} frames")
        lines.extend(f"#\t{f.function}\t{f.filename}:{f.line}" for f in sample.stack)

    sink.write(("\n".join(lines) + "\n").encode("utf-8"))


def write_folded(profile: Profile, sink: BinaryIO) -> None:
    """Write folded stacks: "root;caller;leaf <first value>" per line.

    Stacks are stored innermost first and reversed here.
    Semicolons in names are replaced so the separator stays unambiguous.
    """
    lines = []
    for sample in profile.samples:
        names = (f.function.replace(";", ":") for f in reversed(sample.stack))
        lines.append(f"{';'.join(names)} {sample.values[0]}")
    lines.sort()
    sink.write("".join(f"{line}\n" for line in lines).encode("utf-8"))
