import argparse
import codecs
import sys
import threading
import time

import chardet
import numpy as np
from tqdm import tqdm

import nicome
import settings_loader
import template_store
from log_sink import LogSink


def detect_encoding(raw_data):
    result = chardet.detect(raw_data)

    encoding = result["encoding"]
    return encoding or "utf-8"


def normalize_encoding(encoding):
    # BOM 付きでも先頭行に残らないようにする
    if codecs.lookup(encoding).name == "utf-8":
        return "utf-8-sig"
    return encoding


def read_comment_file(path, encoding=None):
    with open(path, "rb") as f:
        raw_data = f.read()

    if encoding is None:
        encoding = detect_encoding(raw_data)
    text = raw_data.decode(normalize_encoding(encoding))
    # \r\n と \n の両方に対応する
    return [line.rstrip("\r") for line in text.split("\n")]


def make_rngs(seed, n):
    seq = np.random.SeedSequence(seed)
    return [np.random.default_rng(s) for s in seq.spawn(n)]


def check_settings(settings):
    """タイムゾーンと入力エンコーディングを解決し、不正ならどのファイルにも触れる前に送出します。"""
    try:
        tz = nicome.time_tools.get_timezone(settings.TIMEZONE)
    except (KeyError, ValueError) as e:
        raise nicome.errors.SettingsError(f"Unknown timezone: {settings.TIMEZONE}") from e

    if settings.INPUT_ENCODING is not None:
        try:
            codecs.lookup(settings.INPUT_ENCODING)
        except LookupError as e:
            raise nicome.errors.SettingsError(
                f"Unknown encoding: {settings.INPUT_ENCODING}"
            ) from e
    return tz


def convert_file(path, compiled, settings, rng, tz):
    lines = read_comment_file(path, encoding=settings.INPUT_ENCODING)

    records = nicome.line_tools.parse_lines(
        lines,
        compiled,
        ignore_unparseable=settings.IGNORE_UNPARSEABLE,
        path=path,
        tz=tz,
        rng=rng,
        jitter_range=settings.EPOCH_JITTER_RANGE,
    )
    records = nicome.line_tools.sort_records(records)
    outputs = nicome.chat_tools.encode_records(
        records, rng=rng, padding_digits=settings.PADDING_DIGITS
    )

    output_path = path + settings.OUTPUT_SUFFIX
    nicome.chat_tools.write_chats(output_path, outputs)
    return output_path


def _convert_worker(path, compiled, settings, rng, tz, sink, results, slot):
    try:
        convert_file(path, compiled, settings, rng, tz)
    except nicome.errors.ConversionError as e:
        results[slot] = e
        sink.put(str(e))
        return
    except Exception as e:
        # OSError, UnicodeDecodeError など。どの失敗も1行は報告する
        results[slot] = e
        sink.put(f"Error: {path}: {e}")
        return

    results[slot] = True
    sink.put(f"Complete: {path}")


def run_files(paths, template, settings, sink, regex=None):
    """
    ファイルごとにスレッドを立てて変換します。

    テンプレートや設定のエラー (TemplateError, SettingsError) はどのファイルにも触れる前に送出されます。
    ファイルごとのエラーは sink に報告され、戻り値の該当要素に例外として入ります。
    """
    if regex is None:
        regex = settings.REGEX_TEMPLATE
    compiled = nicome.template_tools.compile_template(template, regex=regex)
    tz = check_settings(settings)

    rngs = make_rngs(settings.SEED, len(paths))
    results = [None] * len(paths)
    threads = []
    for i, path in enumerate(paths):
        thread = threading.Thread(
            target=_convert_worker,
            args=(path, compiled, settings, rngs[i], tz, sink, results, i),
        )
        thread.start()
        threads.append(thread)
        if settings.LAUNCH_INTERVAL > 0 and i < len(paths) - 1:
            time.sleep(settings.LAUNCH_INTERVAL)

    with tqdm(total=len(paths), disable=not settings.SHOW_PROGRESS) as bar:
        for thread in threads:
            thread.join()
            bar.update(1)

    return results


def resolve_template(args, entries):
    if args.template is not None:
        return args.template, args.regex or None

    if args.name is not None:
        entry = template_store.find_template(entries, args.name)
        if entry is None:
            raise KeyError(f"Unknown template name: {args.name}")
        return entry.template, entry.regex

    raise ValueError("Either --template or --name is required")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Convert comment logs into NicoNico <chat> lines"
    )
    parser.add_argument("files", nargs="*", help="Comment log files")
    parser.add_argument(
        "--template", type=str, default=None, help='Line template, e.g. "TIME[UNIXTIME]\\tCOMMENT"'
    )
    parser.add_argument(
        "--name", type=str, default=None, help="Name of a saved template"
    )
    parser.add_argument(
        "--ignore_unparseable",
        action="store_true",
        help="Skip lines that do not match the template",
    )
    parser.add_argument(
        "--regex",
        action="store_true",
        help="Treat literal template text as a regular expression",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--settings_path",
        type=str,
        default="app_settings/settings.json",
        help="Settings file path",
    )
    parser.add_argument(
        "--templates_path",
        type=str,
        default="app_settings/templates.json",
        help="Saved templates file path",
    )
    parser.add_argument(
        "--list_templates", action="store_true", help="List saved templates"
    )
    parser.add_argument(
        "--save_template",
        type=str,
        default=None,
        metavar="NAME",
        help="Save --template under NAME",
    )
    args = parser.parse_args(argv)

    if args.list_templates:
        for entry in template_store.load_templates(args.templates_path):
            mode = " (regex)" if entry.regex else ""
            print(f"{entry.name}{mode}: {entry.template}")
        return 0

    if args.save_template is not None:
        try:
            template_store.save_template(
                args.templates_path,
                args.save_template,
                args.template or "",
                regex=args.regex,
            )
        except (ValueError, nicome.errors.TemplateError) as e:
            print(e)
            return 1
        print(f"Saved: {args.save_template}")
        return 0

    overrides = {}
    if args.ignore_unparseable:
        overrides["IGNORE_UNPARSEABLE"] = True
    if args.seed is not None:
        overrides["SEED"] = args.seed
    settings = settings_loader.load(args.settings_path, **overrides)

    try:
        template, regex = resolve_template(
            args, template_store.load_templates(args.templates_path)
        )
    except (KeyError, ValueError) as e:
        print(e)
        return 1

    if not args.files:
        print("No comment files given.")
        return 1

    with LogSink(
        maxsize=settings.LOG_QUEUE_SIZE, interval=settings.LOG_INTERVAL
    ) as sink:
        try:
            results = run_files(args.files, template, settings, sink, regex=regex)
        except nicome.errors.ConversionError as e:
            sink.put(str(e))
            return 1

    return 0 if all(r is True for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
