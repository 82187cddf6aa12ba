#!/usr/bin/env python3
"""Print the parameter registry and the per-engine macro tables.

Usage:
    python tools/param_table.py                    # every parameter
    python tools/param_table.py --module delay-fx  # one module
    python tools/param_table.py --modulatable      # modulation targets only
    python tools/param_table.py --modulatable --effects  # filters combine
    python tools/param_table.py --macros           # macro labels per engine
    python tools/param_table.py --json             # machine-readable dump
"""

from __future__ import annotations
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from engines.macros import ENGINE_VARIANTS, APPLY_ORDER
from params.controller import allows_control_all
from params.registry import ParamDef, ParamMap


def _flags(p: ParamDef) -> str:
    flags = []
    if p.modulatable:
        flags.append("M")
    if p.voice_param:
        flags.append("V")
    if p.effect_param:
        flags.append("FX")
    if p.voice_param and not allows_control_all(p.name):
        flags.append("!ALL")
    return ",".join(flags)


def _range(p: ParamDef) -> str:
    if p.kind == "enum":
        return "|".join(p.options or ())
    if p.kind == "boolean":
        return "on/off"
    return f"{p.min_val}..{p.max_val} /{p.step}{p.unit}"


def format_row(p: ParamDef) -> str:
    return f"  {p.name:<28} {p.label:<8} {_range(p):<22} {str(p.default):<8} {_flags(p):<10} {p.path}"


def render_table(params: list[ParamDef]) -> str:
    lines = [f"  {'Id':<28} {'Label':<8} {'Range':<22} {'Default':<8} {'Flags':<10} Path",
             f"  {'-' * 100}"]
    lines += [format_row(p) for p in params]
    lines.append(f"\n  {len(params)} parameters")
    return "\n".join(lines)


def render_macros() -> str:
    lines = []
    for engine, variant in ENGINE_VARIANTS.items():
        lines.append(f"{engine.value}:")
        for macro in APPLY_ORDER:
            definition = variant.macros.get(macro)
            if definition is None:
                lines.append(f"  {macro.value:<6} -")
                continue
            targets = ", ".join(t.target for t in definition.targets)
            lines.append(f"  {macro.value:<6} {definition.label:<8} -> {targets}")
    return "\n".join(lines)


def to_json(params: list[ParamDef]) -> str:
    return json.dumps([
        {
            "id": p.name, "module": p.module, "label": p.label, "path": p.path,
            "min": p.min_val, "max": p.max_val, "default": p.default, "step": p.step,
            "unit": p.unit, "kind": p.kind, "options": list(p.options) if p.options else None,
            "modulatable": p.modulatable, "voice_param": p.voice_param,
            "effect_param": p.effect_param,
        }
        for p in params
    ], indent=2)


def main(argv: list[str] | None = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Show the parameter registry")
    parser.add_argument("--module", "-m", help="Only parameters owned by this module")
    parser.add_argument("--modulatable", action="store_true",
                        help="Only parameters that accept modulation")
    parser.add_argument("--voice", action="store_true", help="Only per-voice parameters")
    parser.add_argument("--effects", action="store_true", help="Only effect parameters")
    parser.add_argument("--macros", action="store_true",
                        help="Show the macro tables instead of the registry")
    parser.add_argument("--json", action="store_true", help="Emit JSON")
    args = parser.parse_args(argv)

    if args.macros:
        print(render_macros())
        return 0

    param_map = ParamMap()
    params = param_map.by_module(args.module) if args.module else param_map.list_all()
    for wanted, subset in ((args.modulatable, param_map.modulatable),
                           (args.voice, param_map.voice_params),
                           (args.effects, param_map.effect_params)):
        if wanted:
            keep = {p.name for p in subset()}
            params = [p for p in params if p.name in keep]
    if not params:
        print("No matching parameters.")
        return 1

    print(to_json(params) if args.json else render_table(params))
    return 0


if __name__ == "__main__":
    sys.exit(main())
