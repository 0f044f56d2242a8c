"""Built-in evaluation parameters for sales call analysis.

Each parameter is one focused prompt sent to the AI model alongside the call
transcription. Users may submit their own list in the same shape
(``id``, ``name``, ``description``, ``prompt``, ``enabled``).
"""

from __future__ import annotations

from typing import TypedDict


class AnalysisParameter(TypedDict):
    id: str
    name: str
    description: str
    prompt: str
    enabled: bool


DEFAULT_ANALYSIS_PARAMETERS: dict[str, AnalysisParameter] = {
    "call_objective": {
        "id": "call_objective",
        "name": "Call Objective Assessment",
        "description": "Analyze whether the sales call achieved its intended objective",
        "prompt": (
            "Analyze this sales call and evaluate the call objective achievement:\n"
            "1. Identify the primary objective of the call (demo, discovery, closing, "
            "follow-up, etc.)\n"
            "2. Assess whether the objective was achieved (scale 1-10)\n"
            "3. Identify what contributed to success or failure\n"
            "4. Suggest improvements for better objective achievement\n"
            "5. Note any secondary objectives that were addressed\n"
            "Provide specific evidence from the conversation to support your assessment."
        ),
        "enabled": True,
    },
    "rapport_building": {
        "id": "rapport_building",
        "name": "Rapport & Relationship Building",
        "description": "Evaluate how well rapport was established and maintained",
        "prompt": (
            "Assess the rapport and relationship building in this sales call:\n"
            "1. Opening rapport establishment techniques used\n"
            "2. Personal connection moments and small talk effectiveness\n"
            "3. Active listening demonstration and acknowledgment of customer input\n"
            "4. Empathy and understanding shown toward customer needs/challenges\n"
            "5. Trust-building elements and credibility establishment\n"
            "6. Mirroring and matching communication styles\n"
            "7. Closing rapport and relationship maintenance\n"
            "Provide a rapport score from 1-10 and specific examples of effective "
            "rapport-building moments."
        ),
        "enabled": True,
    },
    "needs_discovery": {
        "id": "needs_discovery",
        "name": "Needs Discovery & Qualification",
        "description": "Analyze the quality of needs assessment and lead qualification",
        "prompt": (
            "Evaluate the needs discovery and qualification process in this call:\n"
            "1. Quality and depth of discovery questions asked\n"
            "2. Uncovering of pain points, challenges, and current state\n"
            "3. Budget and decision-making authority qualification\n"
            "4. Timeline and urgency assessment\n"
            "5. Current solution/competitor evaluation\n"
            "6. Stakeholder identification and buying process understanding\n"
            "7. Confirmation and summarization of discovered needs\n"
            "Rate the discovery process 1-10 and identify missed opportunities for deeper "
            "qualification."
        ),
        "enabled": True,
    },
    "presentation_effectiveness": {
        "id": "presentation_effectiveness",
        "name": "Presentation & Demo Effectiveness",
        "description": "Assess how well the solution was presented and demonstrated",
        "prompt": (
            "Analyze the presentation and demonstration effectiveness:\n"
            "1. Customization of presentation to discovered needs\n"
            "2. Clear articulation of value propositions and benefits\n"
            "3. Feature-to-benefit translation and relevance\n"
            "4. Handling of technical concepts and complexity\n"
            "5. Use of stories, case studies, and social proof\n"
            "6. Visual aids and demo flow effectiveness\n"
            "7. Engagement level and customer participation\n"
            "Provide a presentation effectiveness score from 1-10 and suggest specific "
            "improvements."
        ),
        "enabled": True,
    },
    "objection_handling": {
        "id": "objection_handling",
        "name": "Objection Handling",
        "description": "Evaluate how objections and concerns were addressed",
        "prompt": (
            "Assess the objection handling throughout this sales call:\n"
            "1. Identification of stated and unstated objections\n"
            "2. Listening and acknowledgment before responding\n"
            "3. Clarification and understanding of root concerns\n"
            "4. Response quality and evidence provided\n"
            "5. Confirmation that objections were resolved\n"
            "6. Prevention of future objections through proactive addressing\n"
            "7. Maintaining positive relationship despite objections\n"
            "Rate objection handling 1-10 and provide examples of both strong responses "
            "and missed opportunities."
        ),
        "enabled": True,
    },
    "closing_techniques": {
        "id": "closing_techniques",
        "name": "Closing & Next Steps",
        "description": "Analyze closing attempts and next step commitments",
        "prompt": (
            "Evaluate the closing and next steps in this sales call:\n"
            "1. Trial closes and buying signal recognition throughout the call\n"
            "2. Final closing technique used and appropriateness\n"
            "3. Clear next steps definition and mutual commitment\n"
            "4. Timeline establishment and follow-up planning\n"
            "5. Decision-making process and stakeholder involvement\n"
            "6. Urgency creation and compelling reasons to act\n"
            "7. Professional handling of hesitation or delays\n"
            "Provide a closing effectiveness score from 1-10 and suggest alternative "
            "closing approaches that could have been used."
        ),
        "enabled": True,
    },
    "communication_skills": {
        "id": "communication_skills",
        "name": "Communication Skills",
        "description": "Assess overall communication effectiveness and professional presence",
        "prompt": (
            "Analyze the communication skills demonstrated in this call:\n"
            "1. Clarity and articulation of ideas and concepts\n"
            "2. Appropriate pace and tone throughout the conversation\n"
            "3. Professional language and industry knowledge\n"
            "4. Question asking skills and conversation flow\n"
            "5. Active listening and response appropriateness\n"
            "6. Confidence and enthusiasm projection\n"
            "7. Adaptation to customer communication style\n"
            "Rate communication skills 1-10 and provide specific examples of strong "
            "communication moments and areas for improvement."
        ),
        "enabled": True,
    },
    "product_knowledge": {
        "id": "product_knowledge",
        "name": "Product Knowledge & Expertise",
        "description": "Evaluate demonstration of product knowledge and industry expertise",
        "prompt": (
            "Assess the product knowledge and expertise displayed:\n"
            "1. Depth of product/service knowledge demonstrated\n"
            "2. Understanding of technical specifications and capabilities\n"
            "3. Industry knowledge and market awareness\n"
            "4. Competitive positioning and differentiation\n"
            "5. Integration and implementation expertise\n"
            "6. Troubleshooting and problem-solving capability\n"
            "7. Confidence in product recommendations and guidance\n"
            "Provide a knowledge score from 1-10 and identify areas where additional "
            "expertise would have been valuable."
        ),
        "enabled": True,
    },
    "customer_engagement": {
        "id": "customer_engagement",
        "name": "Customer Engagement & Participation",
        "description": "Analyze level of customer engagement and interaction quality",
        "prompt": (
            "Evaluate customer engagement and participation throughout the call:\n"
            "1. Customer participation level and interaction frequency\n"
            "2. Quality of customer questions and engagement depth\n"
            "3. Customer interest indicators and buying signals\n"
            "4. Responsiveness to sales professional's questions\n"
            "5. Initiative in driving conversation and sharing information\n"
            "6. Emotional engagement and enthusiasm level\n"
            "7. Commitment level to next steps and process\n"
            "Rate customer engagement 1-10 and identify factors that contributed to or "
            "hindered engagement levels."
        ),
        "enabled": True,
    },
    "emotional_intelligence": {
        "id": "emotional_intelligence",
        "name": "Emotional Intelligence & Tone Management",
        "description": "Evaluate emotional awareness and tone management throughout the call",
        "prompt": (
            "Analyze the emotional intelligence and tone management in this sales call:\n"
            "1. Emotional awareness and empathy demonstrated\n"
            "2. Tone consistency and appropriateness\n"
            "3. Ability to read and respond to customer emotions\n"
            "4. Management of difficult or tense moments\n"
            "5. Building emotional connection with the customer\n"
            "6. Sentiment progression throughout the conversation\n"
            "7. Professional composure under pressure\n"
            "Provide a score from 1-10 and specific examples of emotional intelligence "
            "in action."
        ),
        "enabled": True,
    },
}


def default_parameter_list() -> list[AnalysisParameter]:
    """Return the built-in parameters as a fresh list of dicts."""
    return [AnalysisParameter(**param) for param in DEFAULT_ANALYSIS_PARAMETERS.values()]
