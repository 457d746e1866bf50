VIDEO_ANALYSIS_PROMPT = (
    "Please analyze this video and provide:\n"
    "1. Main subject/topic\n"
    "2. Key events and timestamps\n"
    "3. Overall summary\n\n"
    "Respond with a JSON object using exactly these keys: "
    '"main_subject" (string), '
    '"key_events" (list of objects with "timestamp" and "event" strings), '
    '"overall_summary" (string).'
)
