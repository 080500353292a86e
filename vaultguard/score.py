import re

LABELS = (
    (30, "very weak", "Very weak - easily guessable"),
    (50, "weak", "Weak - consider a stronger password"),
    (70, "moderate", "Moderate - could be stronger"),
    (90, "strong", "Strong - good password"),
)
TOP_LABEL = ("very strong", "Very strong - excellent password")


def label_for(score: int) -> tuple:
    """Return (label, feedback) for a 0-100 score. Bounds are lower-inclusive."""
    for upper, label, feedback in LABELS:
        if score < upper:
            return label, feedback
    return TOP_LABEL


def score_password(password: str) -> dict:
    """
    Scores the strength of a password on a scale of 0–100 and returns score, label and feedback.
    """
    score = 0

    if password:
        # --- Length ---
        if len(password) >= 8:
            score += 20
        if len(password) >= 12:
            score += 10

        # --- Character variety ---
        if re.search(r"[a-z]", password):
            score += 10
        if re.search(r"[A-Z]", password):
            score += 10
        if re.search(r"[0-9]", password):
            score += 10
        if re.search(r"[^a-zA-Z0-9]", password):
            score += 20

        # --- Common patterns ---
        if re.fullmatch(r"[a-zA-Z]+", password):
            score -= 10
        if re.fullmatch(r"[0-9]+", password):
            score -= 10
        if re.search(r"(.)\1{2,}", password, re.DOTALL):
            score -= 10

    score = max(0, min(100, score))
    label, feedback = label_for(score)

    return {
        "password": password,
        "score": score,
        "label": label,
        "feedback": feedback,
    }


if __name__ == "__main__":
    # For quick testing
    pwd = input("Enter password to test: ")
    result = score_password(pwd)
    print(f"Password Strength: {result['label']} (Score: {result['score']}/100)")
