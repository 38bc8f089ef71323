"""LLM prompts for the decision analysis endpoint."""

from decision_advisor.models import DecisionRequest

PRIORITY_CONTEXT = {
    "low": "This is a low-priority decision where the user has plenty of time to consider options.",
    "medium": "This is a medium-priority decision that should be made within a reasonable timeframe.",
    "high": "This is a high-priority decision that needs to be made relatively soon.",
    "critical": "This is a critical decision that requires urgent attention and quick resolution.",
}

CATEGORY_CONTEXT = {
    "general": "Weigh practical trade-offs, personal values and the likely consequences of each path.",
    "career": "Consider professional growth, compensation, job security, skills development and work-life balance.",
    "relationships": "Consider emotional wellbeing, communication, mutual respect and the long-term health of the relationship.",
    "finance": "Consider risk tolerance, cash flow, opportunity cost, time horizon and long-term financial security.",
    "education": "Consider learning outcomes, cost, time commitment, credential value and future career prospects.",
    "lifestyle": "Consider personal happiness, health, daily routines, social connections and sustainability of the change.",
    "technology": "Consider cost, compatibility, learning curve, vendor support, security and how well the choice will age.",
    "health": "Consider physical and mental wellbeing, medical guidance, long-term effects and safety. Recommend consulting a qualified professional where appropriate.",
}

ANALYSIS_PROMPT = """You are an expert decision-making advisor with expertise in {category} decisions. Analyze this decision scenario and provide structured guidance.{category_context}

DECISION QUESTION: {question}

CATEGORY: {category}
PRIORITY: {priority_line}
{context_block}{options_block}
Please provide your analysis in the following JSON format (respond with ONLY valid JSON, no additional text):

{{
  "quickRecommendation": "A single, clear sentence stating your preferred choice/recommendation",
  "confidence": 85,
  "reasoning": "Brief explanation of why this is the best choice based on the context and priority level",
  "detailedAnalysis": [
    {{
      "option": "Option name or 'Recommended Approach'",
      "isRecommended": true,
      "pros": ["Advantage 1", "Advantage 2", "Advantage 3"],
      "cons": ["Disadvantage 1", "Disadvantage 2", "Disadvantage 3"],
      "riskLevel": "Low/Medium/High",
      "timeToResults": "Short/Medium/Long term",
      "implementationDifficulty": "Easy/Moderate/Hard"
    }}
  ],
  "additionalConsiderations": ["Important factor 1", "Important factor 2"],
  "alternativeApproach": "If applicable, suggest an alternative approach not mentioned in options",
  "nextSteps": ["Concrete action 1", "Concrete action 2", "Concrete action 3"]
}}

IMPORTANT GUIDELINES:
- Give ONE clear preference in quickRecommendation
- Mark exactly one entry in detailedAnalysis with "isRecommended": true
- Confidence should be 65-95 (be realistic, consider uncertainty)
- Provide exactly 3 pros and 3 cons for each option
- Provide at most 5 additionalConsiderations and at most 3 nextSteps
- Be practical and actionable, considering the {priority} priority level
- For {priority} priority decisions, factor in time constraints appropriately
- Tailor additionalConsiderations to the {priority} priority and the {category} category
- Consider real-world implementation challenges
- If comparing multiple options, clearly state which ONE you prefer most
- Base recommendations on logical analysis of risks, benefits, and constraints
- Consider the category context ({category}) in your analysis

Respond with valid JSON only."""


def build_analysis_prompt(
    request: DecisionRequest,
    priority_context: dict[str, str] = PRIORITY_CONTEXT,
    category_context: dict[str, str] = CATEGORY_CONTEXT,
) -> str:
    """Render the analysis prompt for a validated scenario.

    Unknown priorities and categories are still embedded verbatim; they just
    have no context sentence.
    """
    priority_sentence = priority_context.get(request.priority)
    priority_line = request.priority
    if priority_sentence:
        priority_line += f" - {priority_sentence}"

    category_sentence = category_context.get(request.category)

    context_block = ""
    if request.context.strip():
        context_block = f"\nADDITIONAL CONTEXT: {request.context}\n"

    options_block = ""
    if request.options:
        numbered = "\n".join(
            f"{i}. {option}" for i, option in enumerate(request.options, 1)
        )
        options_block = f"\nOPTIONS TO COMPARE:\n{numbered}\n"

    return ANALYSIS_PROMPT.format(
        category=request.category,
        category_context=f" {category_sentence}" if category_sentence else "",
        question=request.question,
        priority=request.priority,
        priority_line=priority_line,
        context_block=context_block,
        options_block=options_block,
    )
