# -*- coding: utf-8 -*-
"""
Operations Report Prompts
==========================
Prompt templates for the Ops Report Agent, which reads the whole chat
history (user tiers, profiles, daily activity) and asks for a community
health and activation plan.
"""

OPS_REPORT_SYSTEM_PROMPT = """你是一位专业的社群运营分析师，关注成员分层、活跃度趋势和可执行的运营动作。
请直接输出 Markdown 报告，不要用代码块包裹。"""


OPS_REPORT_PROMPT = """
你是一位专业的社群运营分析师，请根据以下数据生成"{community_name}"社群的运营分析报告。

## 用户分层数据
- 共创者（高频活跃，连接多人）: {cocreators}
- 重度参与者: {heavy}
- 中度参与者: {medium}
- 轻度参与者: {light}
- 沉默用户: {silent}
- 流失用户（曾活跃，近7天无发言）: {churned}

## 用户画像摘要
{user_summaries}

## 每日活跃度
{activity_data}

## 沉默用户发言样本
{silent_samples}

请生成以下格式的运营报告（Markdown）：

# 📊 {community_name}社群运营分析报告

## 一、整体健康度

### 活跃度趋势
分析每日活跃度变化趋势，识别高峰和低谷

### 参与层级分布
用饼图或列表展示各层级用户占比

### 健康度评分
给出1-100的健康度评分及理由

## 二、用户画像分析

### 共创者特征
分析共创者的共同特点、互动模式、贡献方向

### 用户性格分类
根据发言内容，为关键用户打上性格标签（如：知识分享者/实践派/连接者/旁观者等）

## 三、激活策略

### 沉默用户激活
针对沉默用户，根据他们的历史发言分析：
- 感兴趣的话题是什么？
- 曾在什么情况下互动过？
- 具体的激活方法（复刻当时的场景）

### 流失用户召回
针对流失用户的召回策略

### 轻度用户转化
如何将轻度参与者转化为中度/重度参与者

## 四、话题运营建议

### 受欢迎话题
根据活跃度和互动量，识别最受欢迎的话题类型

### 话题增加建议
哪些话题应该增加频率？

## 五、运营行动清单

给出5-10个具体的、可执行的运营行动建议

---
*生成时间: {generated_on}*
"""
