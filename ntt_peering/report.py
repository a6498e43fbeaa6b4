import json
from typing import Any, Dict, List

from ntt_peering.steps import ExtractedCalldata, Failed, Skipped, Submitted
from ntt_peering.workflow import WorkflowRun

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def exit_code(run: WorkflowRun) -> int:
    """0 only when every planned step was submitted, extracted or skipped."""
    return EXIT_SUCCESS if run.succeeded else EXIT_FAILURE


def _result_fields(result) -> Dict[str, Any]:
    if isinstance(result, Submitted):
        return {"transaction_ids": list(result.transaction_ids)}
    if isinstance(result, Skipped):
        return {"reason": result.reason}
    if isinstance(result, ExtractedCalldata):
        fields = {"target": result.target, "data": result.data, "value": str(result.value)}
        if result.accounts:
            fields["accounts"] = [
                {"pubkey": pubkey, "is_signer": is_signer, "is_writable": is_writable}
                for pubkey, is_signer, is_writable in result.accounts
            ]
        return fields
    if isinstance(result, Failed):
        return {"cause": result.cause, "logs": list(result.logs)}
    raise TypeError(f"Unknown step result {result!r}")


def to_dict(run: WorkflowRun) -> Dict[str, Any]:
    steps: List[Dict[str, Any]] = list()
    for index, (step, result) in enumerate(run.entries, start=1):
        entry = {"index": index, "kind": step.kind, "chain": step.endpoint.name}
        entry["status"] = result.status
        entry.update(_result_fields(result))
        steps.append(entry)
    offset = len(steps)
    for index, step in enumerate(run.pending, start=offset + 1):
        entry = {"index": index, "kind": step.kind, "chain": step.endpoint.name}
        entry["status"] = "not-attempted"
        steps.append(entry)
    return {"success": run.succeeded, "exit_code": exit_code(run), "steps": steps}


def render_json(run: WorkflowRun) -> str:
    return json.dumps(to_dict(run), indent=4)


def render_text(run: WorkflowRun) -> str:
    lines = ["", "Summary", "======="]
    for index, (step, result) in enumerate(run.entries, start=1):
        lines.append(f"\t{index}. {step.kind:<22} {step.endpoint.name:<16} {result.status}")
        lines.append(f"\t   {result.detail()}")
        if isinstance(result, Failed):
            for log in result.logs:
                lines.append(f"\t   | {log}")
    offset = len(run.entries)
    for index, step in enumerate(run.pending, start=offset + 1):
        lines.append(f"\t{index}. {step.kind:<22} {step.endpoint.name:<16} not attempted")
    lines.append("")
    if run.succeeded:
        lines.append(f"All {len(run.steps)} step(s) completed.")
    else:
        lines.append("(!) Workflow halted; completed steps were not rolled back.")
    return "\n".join(lines)
