# template_store.py
import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Optional, Tuple

from nicome.template_tools import compile_template


@dataclass(frozen=True)
class TemplateEntry:
    name: str
    template: str
    regex: bool = False


def load_templates(path: str) -> Tuple[TemplateEntry, ...]:
    if not os.path.exists(path):
        return ()

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    return tuple(
        TemplateEntry(
            name=str(item["Name"]),
            template=str(item["Template"]),
            regex=bool(item.get("Regex", False)),
        )
        for item in raw.get("Items", [])
    )


def find_template(entries, name: str) -> Optional[TemplateEntry]:
    for entry in entries:
        if entry.name == name:
            return entry
    return None


def save_template(
    path: str, name: str, template: str, regex: bool = False
) -> Tuple[TemplateEntry, ...]:
    if not name:
        raise ValueError("Invalid name.")
    if not template:
        raise ValueError("Unable to use blank values.")
    # 保存前にコンパイルできることを確認する (TemplateError はそのまま投げる)
    compile_template(template, regex=regex)

    new_entry = TemplateEntry(name=name, template=template, regex=regex)
    entries = list(load_templates(path))
    for i, entry in enumerate(entries):
        if entry.name == name:
            entries[i] = new_entry
            break
    else:
        entries.append(new_entry)

    data = {
        "Items": [
            {"Name": e.name, "Template": e.template, "Regex": e.regex} for e in entries
        ]
    }

    # 一時ファイルに書いてから置き換える
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        # mkstemp は 0600 で作るので、既存ファイルの権限を引き継ぐ
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise

    return tuple(entries)
