from contribution_robot.models import Theme


LIGHT_THEME = Theme(
    name="light",
    background="#f8fafc",
    panel="#ffffff",
    border="#e2e8f0",
    grid_base="#edf2f7",
    muted="#64748b",
    text="#0f172a",
    low="#86efac",
    medium="#22c55e",
    high="#16a34a",
    accent="#0284c7",
    accent_strong="#0ea5e9",
    robot_body="#e2e8f0",
    robot_stroke="#334155",
    robot_eye="#0ea5e9",
    beam="rgba(14, 165, 233, 0.28)",
)

DARK_THEME = Theme(
    name="dark",
    background="#0d1117",
    panel="#161b22",
    border="#30363d",
    grid_base="#21262d",
    muted="#8b949e",
    text="#c9d1d9",
    low="#0e4429",
    medium="#26a641",
    high="#39d353",
    accent="#58a6ff",
    accent_strong="#79c0ff",
    robot_body="#7ee787",
    robot_stroke="#0d1117",
    robot_eye="#0d1117",
    beam="rgba(88, 166, 255, 0.35)",
)
