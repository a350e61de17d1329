"""User-facing decision reasons (Korean)."""

MESSAGES = {
    "enter": "진입 기준 충족 (점수 {score} ≥ {threshold})",
    "maintain": "보유 유지 기준 충족 (점수 {score} ≥ {threshold})",
    "caution_incumbent": "점수 약화 ({score} < {threshold}), 관찰 필요",
    "caution_new": "진입 기준 미달 ({score} < {threshold}), 관망",
    "caution_grc": "데이터 부족으로 점수 판단 보류 ({score}점)",
    "exit_floor": "점수 하한 이탈 ({score} < {threshold})",
    "exit_gate": "차단 게이트 발동: {code}",
    "replace": "더 강한 후보 {challenger}로 교체 ({challenger_score} vs {comparison})",
    "waiting": "Top {top_n} 슬롯 부족, 교체 기준 미달로 대기",
    "boost": "연속성 보너스 +{boost} 적용",
    "grb": "데이터 일부 누락 (GRB), 참고용 점수",
    "grc": "데이터 부족 (GRC), 신규 진입 및 교체 불가",
}

GATE_MESSAGES = {
    "WALL_REJECTION": "콜 월 저항 근접, 수급 확인 없음",
    "FAKE_PUMP": "급등 대비 수급 미확인 (가짜 펌핑 의심)",
    "SHORT_STORM": "숏 커버링 위험 + 약세 옵션 구조",
    "DEAD_VOLUME": "거래량 고갈, 관심 부재",
    "SHORT_SQUEEZE_READY": "숏 스퀴즈 준비 (공매도 과밀 + 거래량 급증)",
    "TLT_FLIGHT": "장기채 도피, 위험 회피 신호",
}

MAX_TRIGGERS = 3


def message(key: str, **values) -> str:
    return MESSAGES[key].format(**values)


def gate_message(code: str) -> str:
    return GATE_MESSAGES.get(code, code)
