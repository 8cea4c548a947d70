import os
import subprocess


version = "0.1.0"


def from_description(description, default):
    """Turn the output of `git describe --tags` into a version string.

    "v0.2.0" gives "0.2.0" and "v0.2.0-3-g9465d02" gives
    "0.2.0.post3+g9465d02", anything else gives `default`.
    """
    parts = description.lstrip("v").split("-")

    if len(parts) == 1:  # tagged release
        return parts[0]
    elif len(parts) == 3:  # tag + a few commits
        tag, revision, commit = parts
        return "{}.post{}+{}".format(tag, revision, commit)
    else:
        return default


# Inside a git checkout, the tag takes precedence over the number above.
thisdir = os.path.dirname(os.path.abspath(__file__))
try:
    description = subprocess.check_output(
        "git describe --tags".split(),
        stderr=subprocess.DEVNULL,
        cwd=thisdir,
        universal_newlines=True).rstrip()

except (OSError, subprocess.CalledProcessError):
    pass

else:
    version = from_description(description, version)
