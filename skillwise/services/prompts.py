"""Prompt templates for the AI provider.

Templates use ``$name`` placeholders (``string.Template``) so the JSON
examples inside them need no brace escaping.
"""
from string import Template

SYSTEM_PREAMBLES = {
    "challenge": "You are an expert educational content creator specializing in programming challenges. Always respond with valid JSON only.",
    "feedback": "You are an expert programming tutor providing constructive feedback. Always respond with valid JSON only.",
    "hints": "You are a helpful programming tutor. Always respond with valid JSON only.",
    "suggestions": "You are an expert learning path advisor. Always respond with valid JSON only.",
    "analysis": "You are an expert learning analytics advisor. Always respond with valid JSON only.",
}

DIFFICULTY_DESCRIPTIONS = {
    "easy": "beginner-friendly with step-by-step guidance",
    "medium": "intermediate with some complexity requiring problem-solving",
    "hard": "advanced with significant complexity and multiple concepts",
    "expert": "expert-level requiring deep understanding and optimization",
}

TEMPLATES = {
    "challenge": Template("""Generate a coding challenge with the following specifications:

**Category:** $category
**Difficulty Level:** $difficulty ($difficulty_description)
$topic_line
Please provide a JSON response with the following structure (return ONLY valid JSON, no markdown):
{
  "title": "Clear, concise challenge title",
  "description": "Brief overview of what the challenge teaches (2-3 sentences)",
  "instructions": "Detailed step-by-step instructions for completing the challenge",
  "category": "$category",
  "difficulty_level": "$difficulty",
  "estimated_time_minutes": <number>,
  "points_reward": <number based on difficulty>,
  "max_attempts": <number>,
  "tags": ["relevant", "tags", "here"],
  "prerequisites": ["required", "knowledge"],
  "learning_objectives": ["objective1", "objective2", "objective3"],
  "starter_code": "Optional starter code template",
  "test_cases": [
    {"input": "example input", "expected_output": "expected result", "description": "what this tests"}
  ]
}

Make the challenge engaging, educational, and appropriately challenging for the $difficulty level."""),

    "feedback": Template("""**Challenge:** $challenge_title
**Instructions:** $challenge_instructions
**Student's Submission:**
```
$submission
```

Provide detailed, constructive feedback in JSON format (return ONLY valid JSON):
{
  "overall_assessment": "Brief overall assessment of the submission",
  "strengths": ["strength1", "strength2"],
  "areas_for_improvement": ["improvement1", "improvement2"],
  "specific_suggestions": ["suggestion1", "suggestion2"],
  "code_quality_score": <number 1-10>,
  "meets_requirements": <boolean>,
  "next_steps": ["recommended next step 1", "recommended next step 2"]
}

Be encouraging while providing actionable feedback."""),

    "hints": Template("""A student is working on this challenge:

**Challenge:** $challenge_title
**Instructions:** $challenge_instructions
**Attempt Number:** $attempt_number

Provide a $hint_level hint in JSON format (return ONLY valid JSON):
{
  "hint": "Your helpful hint here",
  "hint_level": "$hint_level",
  "resources": ["relevant resource 1", "relevant resource 2"]
}

The hint should guide without giving away the solution entirely."""),

    "suggestions": Template("""Based on this user's completed challenges, suggest 3 next challenges they should attempt:

**Completed Challenges:** $completed_summary

Provide suggestions in JSON format (return ONLY valid JSON):
{
  "suggestions": [
    {
      "category": "category name",
      "difficulty": "easy|medium|hard|expert",
      "topic": "specific topic",
      "reason": "why this is recommended"
    }
  ]
}"""),

    "analysis": Template("""Analyze this user's learning pattern and provide insights:

**Statistics:**
- Challenges Completed: $challenges_completed
- Average Score: $average_score
- Total Points: $total_points

Provide analysis in JSON format (return ONLY valid JSON):
{
  "learning_pace": "slow|moderate|fast",
  "strengths": ["strength1", "strength2"],
  "growth_areas": ["area1", "area2"],
  "recommended_focus": ["focus1", "focus2"],
  "motivation_tips": ["tip1", "tip2"]
}"""),
}


def render(template_name: str, **variables) -> str:
    """Fill a named template; unknown names and missing variables raise."""
    try:
        template = TEMPLATES[template_name]
    except KeyError:
        raise ValueError(f"Template '{template_name}' not found")
    return template.substitute({k: str(v) for k, v in variables.items()})


def with_preamble(template_name: str, prompt: str) -> str:
    return f"{SYSTEM_PREAMBLES[template_name]}\n\n{prompt}"


def hint_level(previous_attempts: int) -> str:
    if previous_attempts <= 0:
        return "gentle nudge"
    if previous_attempts == 1:
        return "more specific"
    return "detailed guidance"
