"""
Local Darja reactions.

Maps (current average, desired average, feasibility) to a short motivational
message. Picks inside a bucket are derived from the averages, so the same
inputs always give the same message.
"""

from __future__ import annotations

from typing import Optional


REACTIONS: dict[str, list[str]] = {
    "very_low": [
        "راك طايح شوية بصح مازال الوقت، شد روحك 💪",
        "واش راك رايح يا خويا؟ لازم تخدم شوية بش تحسن الوضعية 😅",
        "راك في الخطر ولاكن ما زال في الأمل، شد البال وقوم خدمة 📚",
        "ما تحبسش، كل واحد يمر بهادك، ابدا تخدم من دلوك وكل شيء غادي يتحسن ✨",
    ],
    "low": [
        "راك في النص، شوية خدمة وتطلعها إن شاء الله 😌",
        "قريبين من المطلوب، شوية صبر وتعملها بإذن الله 🤝",
        "راك على الطريق الصح، كمل بهاد الطريقة وواصل 💯",
        "ما بأس، شوية جهد إضافي وغادي تطلعها، توكل على الله 🎯",
    ],
    "medium": [
        "راك كيما يجب، ما زال فيك تزيدها شوية وتطلعها أحسن 🚀",
        "ماشي وحش، بصح فيك تزود الطلعة شوية، شد روحك 📈",
        "قريب من الهدف، شوية جهد وتطلعها بزاف ✊",
    ],
    "good": [
        "واش هذا يا وحش 🔥 هكذا تبان الخدمة الصح",
        "راك نجم يا خويا! هكذا يلزمو الطلاب 💎",
        "برافو عليك! راك خدمتي صح ونتا واضح 📊",
        "هذا المستوى المطلوب! راك ماشي في الطريق الصح ⭐",
    ],
    "excellent": [
        "إيش هذا المستوى الفوقاني! راك بطل حقيقي 🏆",
        "واش هذا الطالب الممتاز! هكذا تبان التميز 🌟",
        "راك فوق كل التوقعات! برافو برافو برافو 🎉",
    ],
    "impossible": [
        "هاد الهدف صعب شوية، بصح جرب تقرب منه قدر المستطاع 🤔",
        "واش راك تبي تشدها؟ هاد الهدف كبير شوية بصح ما تستسلمش 😤",
        "راك طامع بزاف! جرب تزيد من الخدمة وتوصل لقريب من الهدف 💪",
    ],
    "achievable": [
        "هاد الهدف ممكن! شد روحك وقوم خدمة شوية وتوصل 🎯",
        "ماشي بعيد، شوية جهد إضافي وتطلعها إن شاء الله ✨",
        "راك قريب، جرب تخدم شوية أكثر وتوصل للهدف 📚",
    ],
}

FAR_FROM_TARGET = "هاد الهدف بعيد شوية، بصح كل شيء ممكن بالعمل الشاق 💪"
CLOSE_TO_TARGET = "قريبين بزاف! شوية جهد إضافي وتطلعها إن شاء الله 🎯"
TARGET_REACHED = "راك وصلت الهدف! جرب تزيدها شوية وتطلعها أحسن 🔥"
NO_GRADES_YET = "ابدأ تدخل النقاط وتحسب النتيجة مباشرة 📊"

# used when the remote assistant fails
REACTION_FALLBACK = "راك ماشي على الطريق الصح، كمل! 💪"


def _pick(bucket: str, *values: Optional[float]) -> str:
    options = REACTIONS[bucket]
    key = sum(int(round(v * 100)) for v in values if v is not None)
    return options[key % len(options)]


def select_reaction(current: Optional[float], desired: Optional[float], feasible: bool) -> str:
    """
    Return the reaction message for the given situation.

    With a desired average the message is about the gap; otherwise it is about
    the current average alone.
    """
    if desired is not None:
        if not feasible:
            return _pick("impossible", desired, current)
        if current is None:
            return _pick("achievable", desired)

        gap = desired - current
        if gap > 3:
            return FAR_FROM_TARGET
        if gap > 1:
            return _pick("achievable", desired, current)
        if gap > 0:
            return CLOSE_TO_TARGET
        return TARGET_REACHED

    if current is None:
        return NO_GRADES_YET

    if current < 10:
        return _pick("very_low", current)
    if current < 12:
        return _pick("low", current)
    if current < 14:
        return _pick("medium", current)
    if current < 16:
        return _pick("good", current)
    return _pick("excellent", current)
