import logging
import os
from typing import Dict, List, Tuple

from PIL import Image
import pytesseract
from pytesseract import Output  # type: ignore

from .schema import OcrEngineError, OcrResult, OcrWord

logger = logging.getLogger("readgrade")


def configure_tesseract(path: str) -> bool:
    """Point pytesseract at an explicit binary (Windows / custom installs).

    Ignored when the path is empty or does not exist, so the PATH lookup
    stays in effect.
    """
    if path and os.path.exists(path):
        pytesseract.pytesseract.tesseract_cmd = path
        logger.info("Using tesseract binary at %s", path)
        return True
    if path:
        logger.warning("TESSERACT_PATH %s does not exist; using tesseract from PATH", path)
    return False


def _safe_float(x) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return -1.0


def _parse_data(data: Dict[str, List]) -> Tuple[List[OcrWord], str]:
    """
    Turn image_to_data output into words plus page text.

    Tokens are regrouped into lines using (block_num, par_num, line_num);
    lines are joined with newlines in reading order.
    """
    n = len(data.get("text", []))
    words: List[OcrWord] = []
    groups: Dict[Tuple[int, int, int], List[int]] = {}

    for i in range(n):
        txt = (data["text"][i] or "").strip()
        if not txt:
            continue
        conf = _safe_float(data.get("conf", ["-1"] * n)[i])
        # tesseract reports -1 for layout rows; those carry no word
        if conf < 0:
            continue

        x, y = int(data["left"][i]), int(data["top"][i])
        w, h = int(data["width"][i]), int(data["height"][i])
        words.append(OcrWord(text=txt, confidence=conf, bbox=(x, y, x + w, y + h)))

        key = (
            int(data.get("block_num", [0] * n)[i]),
            int(data.get("par_num", [0] * n)[i]),
            int(data.get("line_num", [0] * n)[i]),
        )
        groups.setdefault(key, []).append(i)

    lines: List[Tuple[int, int, str]] = []
    for idxs in groups.values():
        idxs_sorted = sorted(idxs, key=lambda j: int(data["left"][j]))
        text = " ".join(str(data["text"][j]).strip() for j in idxs_sorted)
        top = min(int(data["top"][j]) for j in idxs_sorted)
        left = min(int(data["left"][j]) for j in idxs_sorted)
        lines.append((top, left, text))

    lines.sort(key=lambda ln: (ln[0], ln[1]))
    return words, "\n".join(t for _, _, t in lines)


def run_tesseract(pil_img: Image.Image, lang: str = "eng") -> OcrResult:
    # pytesseract raises a bare RuntimeError on timeout
    try:
        data = pytesseract.image_to_data(
            pil_img,
            lang=lang,
            output_type=Output.DICT,
            config="--oem 3 --psm 3",
        )
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError, RuntimeError) as e:
        raise OcrEngineError(f"tesseract failed: {e}") from e

    try:
        words, text = _parse_data(data)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise OcrEngineError(f"unexpected tesseract output: {e}") from e

    confs = [w.confidence for w in words]
    conf_avg = float(sum(confs) / len(confs)) if confs else 0.0
    logger.debug("tesseract: %d words, mean conf %.1f", len(words), conf_avg)
    return OcrResult(engine="tesseract", confidence=conf_avg, text=text, words=words)
