"""Actionable error catalog for backupagent."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "dump_tool_not_found": {
        "what": "Required command not found: {binary}.",
        "next": "Install the database client tools (or Docker for containerized mode) and retry.",
    },
    "dump_failed": {
        "what": "{tool} exited with status {returncode}.",
        "next": "Check the database credentials, host reachability and dump options.",
    },
    "artifact_unwritable": {
        "what": "Cannot write backup artifact {path}: {reason}",
        "next": "Make sure BACKUP_OUTPUT_DIR exists and is writable by the agent.",
    },
    "upload_failed": {
        "what": "Upload of {path} to s3://{bucket}/{key} failed: {reason}",
        "next": "Verify S3 credentials, bucket name, region and network access.",
    },
    "unsupported_engine": {
        "what": "Unsupported database type: {engine}.",
        "next": "Set DATABASE_TYPE to `mysql` or `postgresql`.",
    },
    "missing_setting": {
        "what": "Missing required setting {name} for {context}.",
        "next": "Set {name} in the environment, the .env file or the YAML config.",
    },
}


def actionable_error(code: str, **kwargs: object) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
